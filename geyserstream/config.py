"""Plugin configuration with its defaults."""

from __future__ import annotations

import ipaddress
import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Mapping

from .compression import CompressionKind, CompressionType
from .defaults import (
    DEFAULT_ACK_EXPONENT,
    DEFAULT_CC_ALGORITHM,
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_DISCONNECT_LAGGY_CLIENTS,
    DEFAULT_DISCOVER_PMTU,
    DEFAULT_ENABLE_GSO,
    DEFAULT_ENABLE_PACING,
    DEFAULT_INCREMENTAL_PRIORITY,
    DEFAULT_MAX_ACK_DELAY,
    DEFAULT_MAX_NB_CONNECTIONS,
    DEFAULT_MAX_RECIEVE_WINDOW_SIZE,
    DEFAULT_MAX_STREAMS,
)

_COMPRESSION_NAMES = {
    CompressionKind.NONE: "None",
    CompressionKind.LZ4_FAST: "Lz4Fast",
    CompressionKind.LZ4: "Lz4",
}
_COMPRESSION_KINDS = {name: kind for kind, name in _COMPRESSION_NAMES.items()}


def _compression_to_json(ctype: CompressionType) -> Any:
    name = _COMPRESSION_NAMES[ctype.kind]
    if ctype.kind is CompressionKind.NONE:
        return name
    return {name: ctype.value}


def _compression_from_json(value: Any) -> CompressionType:
    if value == "None":
        return CompressionType.none()
    if isinstance(value, Mapping) and len(value) == 1:
        (name, param), = value.items()
        kind = _COMPRESSION_KINDS.get(name)
        if kind is not None and kind is not CompressionKind.NONE and isinstance(param, int):
            return CompressionType(kind, param)
    raise ValueError(f"invalid compression type {value!r}")


def _check_socket_address(text: str) -> str:
    host, sep, port_text = text.rpartition(":")
    if not sep:
        raise ValueError(f"invalid socket address {text!r}")
    if host.startswith("[") and host.endswith("]"):
        ip = ipaddress.ip_address(host[1:-1])
        if ip.version != 6:
            raise ValueError(f"invalid socket address {text!r}")
    else:
        ip = ipaddress.ip_address(host)
        if ip.version != 4:
            raise ValueError(f"invalid socket address {text!r}")
    if not port_text.isdigit() or int(port_text) > 65535:
        raise ValueError(f"invalid socket address {text!r}")
    return text


@dataclass
class QuicParameters:
    max_number_of_streams_per_client: int = DEFAULT_MAX_STREAMS
    recieve_window_size: int = DEFAULT_MAX_RECIEVE_WINDOW_SIZE
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    max_number_of_connections: int = DEFAULT_MAX_NB_CONNECTIONS
    max_ack_delay: int = DEFAULT_MAX_ACK_DELAY
    ack_exponent: int = DEFAULT_ACK_EXPONENT
    enable_pacing: bool = DEFAULT_ENABLE_PACING
    cc_algorithm: str = DEFAULT_CC_ALGORITHM
    incremental_priority: bool = DEFAULT_INCREMENTAL_PRIORITY
    enable_gso: bool = DEFAULT_ENABLE_GSO
    discover_pmtu: bool = DEFAULT_DISCOVER_PMTU
    disconnect_laggy_client: bool = DEFAULT_DISCONNECT_LAGGY_CLIENTS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuicParameters":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CompressionParameters:
    compression_type: CompressionType = field(default_factory=CompressionType.default)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompressionParameters":
        if "compression_type" not in data:
            raise ValueError("missing field `compression_type`")
        return cls(_compression_from_json(data["compression_type"]))

    def to_dict(self) -> dict[str, Any]:
        return {"compression_type": _compression_to_json(self.compression_type)}


@dataclass
class ConfigQuicPlugin:
    log_level: str = "info"
    address: str = "[::]:10800"
    quic_parameters: QuicParameters = field(default_factory=QuicParameters)
    compression_parameters: CompressionParameters = field(default_factory=CompressionParameters)
    number_of_retries: int = 100
    allow_accounts: bool = True
    allow_accounts_at_startup: bool = False
    enable_block_builder: bool = False
    build_blocks_with_accounts: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigQuicPlugin":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown field `{unknown[0]}`")
        values = dict(data)
        if "address" in values:
            _check_socket_address(values["address"])
        if "quic_parameters" in values:
            values["quic_parameters"] = QuicParameters.from_dict(values["quic_parameters"])
        if "compression_parameters" in values:
            values["compression_parameters"] = CompressionParameters.from_dict(
                values["compression_parameters"]
            )
        return cls(**values)

    @classmethod
    def from_json(cls, text: str) -> "ConfigQuicPlugin":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("configuration must be a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "log_level": self.log_level,
            "address": self.address,
            "quic_parameters": self.quic_parameters.to_dict(),
            "compression_parameters": self.compression_parameters.to_dict(),
            "number_of_retries": self.number_of_retries,
            "allow_accounts": self.allow_accounts,
            "allow_accounts_at_startup": self.allow_accounts_at_startup,
            "enable_block_builder": self.enable_block_builder,
            "build_blocks_with_accounts": self.build_blocks_with_accounts,
        }