import unittest

from ros_bridge.utils.address import join_host_port, split_host_port


class TestSplitHostPort(unittest.TestCase):

    def test_valid_forms(self):
        cases = {
            "router.lan": ("router.lan", 8728),
            "10.0.0.1:8729": ("10.0.0.1", 8729),
            "[fe80::1]:8728": ("fe80::1", 8728),
            "[fe80::1]": ("fe80::1", 8728),
            "fe80::1": ("fe80::1", 8728),
            "10.0.0.1:": ("10.0.0.1", 8728),
        }
        for address, expected in cases.items():
            with self.subTest(address=address):
                self.assertEqual(split_host_port(address, 8728), expected)

    def test_no_default_port(self):
        self.assertEqual(split_host_port("router.lan"), ("router.lan", None))

    def test_invalid_forms(self):
        for address in ("", ":8728", "[fe80::1", "[fe80::1]x", "host:0", "host:70000", "host:abc"):
            with self.subTest(address=address):
                with self.assertRaises(ValueError):
                    split_host_port(address, 8728)

    def test_join(self):
        self.assertEqual(join_host_port("10.0.0.1", 8728), "10.0.0.1:8728")
        self.assertEqual(join_host_port("fe80::1", 8729), "[fe80::1]:8729")


if __name__ == "__main__":
    unittest.main()
