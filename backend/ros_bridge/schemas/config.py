"""
Bridge Configuration Schema

YAML layout:
-----------
    server:
      http_listen_address: 0.0.0.0:22003
      http_tls_config:
        cert_file: /etc/bridge/tls.crt
        key_file: /etc/bridge/tls.key
        client_auth_type: NoClientCert
        client_ca_file: /etc/bridge/clients-ca.crt
      cors:
        allowed_origins: ["https://ui.example.com"]
        max_age: 600
    Aliases:
      packages:
        path: /system/package
      addresses:
        path: /ip/address
        create: true
        update: true
        delete: true
    Devices:
      dev1:
        address: 10.11.12.13
        username: admin
        password: secret
        timeout: 10
        tls:
          ca: /etc/bridge/router-ca.pem
          skip_verify: false

Normalization:
-------------
Config.normalize() runs once after decoding. Defaults are immutable models
merged with fill_missing(): a field keeps its explicit value and only absent
(None / "" / []) fields take the default, recursively for nested models.
"""
import ssl
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ros_bridge.core.errors import ConfigError
from ros_bridge.utils.address import split_host_port

MASKED_PASSWORD = "*********"

# Go crypto/tls names, kept so existing configuration files still load
CLIENT_AUTH_TYPES: Dict[str, ssl.VerifyMode] = {
    "NoClientCert": ssl.CERT_NONE,
    "RequestClientCert": ssl.CERT_OPTIONAL,
    "RequireAnyClientCert": ssl.CERT_REQUIRED,
    "VerifyClientCertIfGiven": ssl.CERT_OPTIONAL,
    "RequireAndVerifyClientCert": ssl.CERT_REQUIRED,
}
CLIENT_AUTH_NEEDS_CA = {"VerifyClientCertIfGiven", "RequireAndVerifyClientCert"}


class TLSConfig(BaseModel):
    """TLS material of the REST endpoint itself"""
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    client_auth_type: Optional[str] = None
    client_ca_file: Optional[str] = None

    @property
    def cert_reqs(self) -> ssl.VerifyMode:
        return CLIENT_AUTH_TYPES[self.client_auth_type or "NoClientCert"]


class CorsConfig(BaseModel):
    allowed_origins: Optional[List[str]] = None
    max_age: Optional[int] = None


class ServerConfig(BaseModel):
    http_listen_address: Optional[str] = None
    http_tls_config: Optional[TLSConfig] = None
    cors: Optional[CorsConfig] = None

    @property
    def listen_host(self) -> str:
        host, _ = _split_listen_address(self.http_listen_address)
        return host

    @property
    def listen_port(self) -> int:
        _, port = _split_listen_address(self.http_listen_address)
        return port

    def validate_settings(self) -> None:
        try:
            _split_listen_address(self.http_listen_address)
        except ValueError as e:
            raise ConfigError(f"invalid http_listen_address: {e}") from e

        tls = self.http_tls_config
        if tls is None:
            return
        if not tls.cert_file or not tls.key_file:
            raise ConfigError("http_tls_config requires both cert_file and key_file")
        if tls.client_auth_type and tls.client_auth_type not in CLIENT_AUTH_TYPES:
            raise ConfigError(
                f"unknown client_auth_type '{tls.client_auth_type}', "
                f"expected one of: {', '.join(CLIENT_AUTH_TYPES)}"
            )
        if tls.client_auth_type in CLIENT_AUTH_NEEDS_CA and not tls.client_ca_file:
            raise ConfigError(f"client_auth_type '{tls.client_auth_type}' requires client_ca_file")


class DeviceTLS(BaseModel):
    """TLS settings used when dialing the device API-SSL service"""
    ca: Optional[str] = None
    # "verify" is the key name used by older configuration files
    skip_verify: bool = Field(default=False, validation_alias=AliasChoices("skip_verify", "verify"))


class DeviceDetail(BaseModel):
    # unquoted YAML scalars such as `password: 12345678` load as numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    address: str = ""
    username: str = ""
    password: str = ""
    timeout: Optional[float] = None
    tls: Optional[DeviceTLS] = None

    def redacted(self) -> "DeviceDetail":
        return self.model_copy(update={"password": MASKED_PASSWORD}, deep=True)


class AliasDetail(BaseModel):
    name: Optional[str] = None
    path: str = ""
    create: Optional[bool] = None
    update: Optional[bool] = None
    delete: Optional[bool] = None


DEFAULT_SERVER = ServerConfig(
    http_listen_address="0.0.0.0:22003",
    # Permissive on purpose: the UI usually runs on a different origin.
    # Deployments should narrow this down.
    cors=CorsConfig(allowed_origins=["*"], max_age=1200),
)
DEFAULT_ALIAS = AliasDetail(create=False, update=False, delete=False)
DEFAULT_DEVICE = DeviceDetail(timeout=30.0)


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == []


def fill_missing(target: BaseModel, defaults: BaseModel) -> BaseModel:
    """Copy default values into fields of target that are absent; explicit values win"""
    for field in type(defaults).model_fields:
        default_value = getattr(defaults, field)
        if _is_missing(default_value):
            continue
        current = getattr(target, field)
        if _is_missing(current):
            if isinstance(default_value, BaseModel):
                default_value = default_value.model_copy(deep=True)
            elif isinstance(default_value, list):
                default_value = list(default_value)
            setattr(target, field, default_value)
        elif isinstance(current, BaseModel) and isinstance(default_value, BaseModel):
            fill_missing(current, default_value)
    return target


def _split_listen_address(address: Optional[str]):
    address = address or ""
    if address.startswith(":"):
        address = "0.0.0.0" + address
    host, port = split_host_port(address)
    if port is None:
        raise ValueError(f"missing port in address: {address}")
    return host, port


class Config(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    aliases: Dict[str, AliasDetail] = Field(
        default_factory=dict, validation_alias=AliasChoices("Aliases", "aliases")
    )
    devices: Dict[str, DeviceDetail] = Field(
        default_factory=dict, validation_alias=AliasChoices("Devices", "devices")
    )

    def normalize(self) -> "Config":
        """
        Fill defaults and validate, in place

        Raises:
            ConfigError: first problem found, naming the offending entity
        """
        fill_missing(self.server, DEFAULT_SERVER)
        self.server.validate_settings()

        if not self.aliases:
            raise ConfigError("no aliases defined")
        for name, alias in self.aliases.items():
            alias.name = name
            if not alias.path:
                raise ConfigError(f"alias '{name}' is missing path")
            fill_missing(alias, DEFAULT_ALIAS)

        if not self.devices:
            raise ConfigError("no device defined")
        for name, device in self.devices.items():
            device.name = name
            for field in ("username", "password", "address"):
                if not getattr(device, field):
                    raise ConfigError(f"device '{name}' is missing {field}")
            fill_missing(device, DEFAULT_DEVICE)
            if device.timeout <= 0:
                raise ConfigError(f"device '{name}' has non-positive timeout {device.timeout}")
        return self
