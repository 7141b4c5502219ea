import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from ros_bridge.clients.routeros_client import RouterOSSessionManager
from ros_bridge.main import create_app
from ros_bridge.schemas.command import REPLY_TRAP, Reply
from ros_bridge.schemas.config import MASKED_PASSWORD, DeviceDetail, DeviceTLS

from fakes import FakeSessionManager, make_config


class TestItemEndpoints(unittest.TestCase):

    def client(self, *replies) -> TestClient:
        self.sessions = FakeSessionManager(*replies)
        return TestClient(create_app(make_config(), sessions=self.sessions))

    def test_list_packages(self):
        records = [{".id": "*1", "name": "routeros"}, {".id": "*2", "name": "wifi"}]
        response = self.client(Reply(records=records)).get("/api/v1/devices/dev1/packages")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), records)

    def test_get_missing_id_is_empty_404(self):
        response = self.client(Reply()).get("/api/v1/devices/dev1/packages/999")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.content, b"")

    def test_get_item(self):
        record = {".id": "*1", "name": "routeros"}
        response = self.client(Reply(records=[record])).get("/api/v1/devices/dev1/packages/*1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), record)

    def test_create_disabled_does_not_contact_device(self):
        response = self.client().post("/api/v1/devices/dev1/packages", json={"name": "x"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.sessions.opened, 0)

    def test_create(self):
        created = {".id": "*9", "address": "10.0.0.9/24"}
        client = self.client(Reply(returned_ids=["*9"]), Reply(records=[created]))

        response = client.post("/api/v1/devices/dev1/addresses", json={"address": "10.0.0.9/24"})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), created)

    def test_create_with_non_string_value(self):
        response = self.client().post("/api/v1/devices/dev1/addresses", json={"address": "10.0.0.9/24", "mtu": 1500})

        self.assertEqual(response.status_code, 400)
        self.assertIn("mtu", response.text)
        self.assertEqual(self.sessions.opened, 0)

    def test_patch(self):
        updated = {".id": "*9", "comment": "uplink"}
        response = self.client(Reply(), Reply(records=[updated])).patch(
            "/api/v1/devices/dev1/addresses/*9", json={"comment": "uplink"}
        )

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), updated)

    def test_delete(self):
        response = self.client(Reply()).delete("/api/v1/devices/dev1/addresses/*9")

        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.content, b"")

    def test_delete_trap_is_500(self):
        response = self.client(Reply(status=REPLY_TRAP, message="no such item")).delete(
            "/api/v1/devices/dev1/addresses/*9"
        )

        self.assertEqual(response.status_code, 500)
        self.assertIn("no such item", response.text)

    def test_unknown_device_and_alias(self):
        client = self.client()

        response = client.get("/api/v1/devices/nope/packages")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, "no such device: nope")

        response = client.get("/api/v1/devices/dev1/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, "no such alias: nope")


class TestDeviceSessionErrors(unittest.TestCase):

    def test_invalid_trust_root_is_500_without_login(self):
        config = make_config()
        config.devices["tls-dev"] = DeviceDetail(
            name="tls-dev",
            username="admin",
            password="secret",
            address="10.0.0.2",
            timeout=30,
            tls=DeviceTLS(ca="/nonexistent/ca.pem"),
        )
        connect = MagicMock()
        client = TestClient(create_app(config, sessions=RouterOSSessionManager(connect=connect)))

        response = client.get("/api/v1/devices/tls-dev/packages")

        self.assertEqual(response.status_code, 500)
        self.assertIn("/nonexistent/ca.pem", response.text)
        connect.assert_not_called()

    def test_unreachable_device_is_500(self):
        connect = MagicMock(side_effect=ConnectionRefusedError(111, "Connection refused"))
        client = TestClient(create_app(make_config(), sessions=RouterOSSessionManager(connect=connect)))

        response = client.get("/api/v1/devices/dev1/packages")

        self.assertEqual(response.status_code, 500)
        self.assertIn("Connection refused", response.text)


class TestConfigEndpoints(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(create_app(make_config(), sessions=FakeSessionManager()))

    def test_devices_are_redacted(self):
        response = self.client.get("/api/v1/devices")

        self.assertEqual(response.status_code, 200)
        devices = response.json()
        self.assertEqual(devices[0]["password"], MASKED_PASSWORD)
        self.assertNotIn("secret", response.text)

    def test_aliases(self):
        response = self.client.get("/api/v1/aliases")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["addresses"]["path"], "/ip/address")

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok", "devices": 1, "aliases": 2})

    def test_openapi_document(self):
        for path in ("/spec/openapi.v1.json", "/spec/opeanapi.v1.json"):
            with self.subTest(path=path):
                response = self.client.get(path)
                self.assertEqual(response.status_code, 200)
                self.assertIn("/api/v1/devices/{dev}/{alias}/{id}", response.json()["paths"])

    def test_cors_preflight(self):
        response = self.client.options(
            "/api/v1/devices/dev1/addresses/*1",
            headers={"Origin": "https://ui.example.com", "Access-Control-Request-Method": "PATCH"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], "*")
        self.assertEqual(response.headers["access-control-max-age"], "1200")


if __name__ == "__main__":
    unittest.main()
