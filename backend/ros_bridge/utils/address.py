from typing import Optional, Tuple


def split_host_port(address: str, default_port: Optional[int] = None) -> Tuple[str, Optional[int]]:
    """
    Split "host[:port]" into (host, port)

    Supported forms:
        router.lan            -> ("router.lan", default_port)
        10.0.0.1:8729         -> ("10.0.0.1", 8729)
        [fe80::1]:8728        -> ("fe80::1", 8728)
        [fe80::1]             -> ("fe80::1", default_port)
        fe80::1               -> ("fe80::1", default_port)

    Raises:
        ValueError: empty host, malformed brackets or invalid port
    """
    address = address.strip()
    port_text: Optional[str] = None

    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address: {address}")
        host = address[1:end]
        rest = address[end + 1:]
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"unexpected text after ']' in address: {address}")
            port_text = rest[1:]
    elif address.count(":") == 1:
        host, port_text = address.split(":")
    else:
        # plain hostname or unbracketed IPv6 literal
        host = address

    if not host:
        raise ValueError(f"missing host in address: {address}")

    if port_text is None or port_text == "":
        return host, default_port
    if not port_text.isdigit() or not 0 < int(port_text) < 65536:
        raise ValueError(f"invalid port in address: {address}")
    return host, int(port_text)


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
