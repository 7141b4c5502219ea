"""
RouterOS API session manager

One session per REST request:

    with sessions.session(device) as session:
        reply = session.run(("/ip/address/print",))

Flow:
-----
1. Resolve host/port (8728 plain, 8729 API-SSL when TLS is configured)
2. Build TLS context (optional root CA, optional skip-verify)
3. Dial + login via librouteros.connect (device timeout = connect deadline)
4. Yield RouterOSSession
5. Close the API connection on every exit path

No pooling, no retries: every call is a fresh dial-login-use-close cycle.
"""
import ssl
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import librouteros
from librouteros.exceptions import ConnectionClosed, FatalError, MultiTrapError, ProtocolError, TrapError

from ros_bridge.core.errors import AuthError, DeviceConnectionError, DeviceError, TLSTrustError
from ros_bridge.core.logging import logger
from ros_bridge.schemas.command import REPLY_DONE, REPLY_TRAP, Reply
from ros_bridge.schemas.config import DeviceDetail, DeviceTLS
from ros_bridge.utils.address import join_host_port, split_host_port

DEFAULT_PLAIN_PORT = 8728
DEFAULT_TLS_PORT = 8729

TRANSPORT_ERRORS = (ConnectionClosed, FatalError, ProtocolError, OSError)


def resolve_endpoint(device: DeviceDetail) -> Tuple[str, int]:
    default_port = DEFAULT_TLS_PORT if device.tls is not None else DEFAULT_PLAIN_PORT
    return split_host_port(device.address, default_port)


def build_tls_context(device_name: str, tls: DeviceTLS) -> ssl.SSLContext:
    """
    Client-side TLS context for API-SSL

    Raises:
        TLSTrustError: root CA file unreadable or not valid PEM
    """
    context = ssl.create_default_context()
    if tls.ca:
        try:
            context.load_verify_locations(cafile=tls.ca)
        except (OSError, ssl.SSLError, ValueError) as e:
            raise TLSTrustError(device_name, tls.ca, str(e)) from e
    if tls.skip_verify:
        # self-signed router certificates
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def parse_attributes(words: Sequence[str]) -> Dict[str, str]:
    """("=name=ether1", "=.id=*1") -> {"name": "ether1", ".id": "*1"}"""
    attributes = {}
    for word in words:
        if not word.startswith("="):
            continue
        key, _, value = word[1:].partition("=")
        attributes[key] = value
    return attributes


class RouterOSSession:
    """Authenticated API connection owned by exactly one request"""

    def __init__(self, api, device: DeviceDetail):
        self._api = api
        self.device = device

    def run(self, sentence: Sequence[str]) -> Reply:
        """
        Send one sentence and read sentences up to the terminal "!done"

        "!trap" is reported in the Reply (status + message), not raised:
        the reply interpreter decides what a failed status means.

        Raises:
            DeviceConnectionError: transport closed or "!fatal" from device
            DeviceError: reply words are not valid UTF-8
        """
        command, *words = sentence
        logger.debug(f"sending command to device={self.device.name} sentence={','.join(sentence)}")
        try:
            self._api.protocol.writeSentence(command, *words)
            reply = self._read_reply()
        except TRANSPORT_ERRORS as e:
            logger.error(f"got error from device={self.device.name}: {e}")
            raise DeviceConnectionError(self.device.name, self.device.address, e) from e
        except UnicodeDecodeError as e:
            logger.error(f"undecodable reply from device={self.device.name}: {e}")
            raise DeviceError("undecodable reply", str(e)) from e
        logger.debug(
            f"got response from device={self.device.name} status={reply.status} "
            f"records={len(reply.records)} ret={reply.returned_ids}"
        )
        return reply

    def _read_reply(self) -> Reply:
        records: List[Dict[str, str]] = []
        returned_ids: List[str] = []
        status = REPLY_DONE
        message: Optional[str] = None

        while True:
            reply_word, words = self._api.protocol.readSentence()
            attributes = parse_attributes(words)
            if reply_word == "!re":
                records.append(attributes)
            elif reply_word == REPLY_TRAP:
                status = REPLY_TRAP
                message = attributes.get("message", message)
            elif reply_word == REPLY_DONE:
                if "ret" in attributes:
                    returned_ids.append(attributes["ret"])
                return Reply(records=records, status=status, message=message, returned_ids=returned_ids)
            # "!empty" (RouterOS 7.18+) carries nothing


class RouterOSSessionManager:
    """
    Opens request-scoped sessions

    Args:
        connect: librouteros.connect compatible callable (injectable for tests)
    """

    def __init__(self, connect: Callable = librouteros.connect):
        self._connect = connect

    @contextmanager
    def session(self, device: DeviceDetail) -> Iterator[RouterOSSession]:
        try:
            host, port = resolve_endpoint(device)
        except ValueError as e:
            raise DeviceConnectionError(device.name, device.address, e) from e

        context = build_tls_context(device.name, device.tls) if device.tls is not None else None
        logger.debug(
            f"opening connection to device={device.name} address={join_host_port(host, port)} "
            f"timeout={device.timeout} tls={context is not None}"
        )

        # sockets handed out by the dialer; librouteros does not close them on login trap
        acquired: List = []

        def wrap_socket(sock):
            acquired.append(sock)
            if context is None:
                return sock
            try:
                tls_sock = context.wrap_socket(sock, server_hostname=host)
            except (OSError, ValueError):
                sock.close()
                raise
            acquired.append(tls_sock)
            return tls_sock

        try:
            api = self._connect(
                host=host,
                username=device.username,
                password=device.password,
                port=port,
                timeout=device.timeout,
                encoding="utf-8",
                ssl_wrapper=wrap_socket,
            )
        except (TrapError, MultiTrapError) as e:
            _close_sockets(acquired)
            logger.error(f"login to device={device.name} rejected: {e}")
            raise AuthError(device.name, str(e)) from e
        except TRANSPORT_ERRORS as e:
            _close_sockets(acquired)
            logger.error(f"cannot connect to device={device.name} address={join_host_port(host, port)}: {e}")
            raise DeviceConnectionError(device.name, device.address, e) from e

        logger.debug(f"opened connection to device={device.name}")
        try:
            yield RouterOSSession(api, device)
        finally:
            logger.debug(f"closing client connection device={device.name}")
            try:
                api.close()
            except TRANSPORT_ERRORS as e:
                logger.debug(f"error while closing connection to device={device.name}: {e}")


def _close_sockets(sockets: List) -> None:
    for sock in reversed(sockets):
        try:
            sock.close()
        except OSError as e:
            logger.debug(f"error while closing socket: {e}")
