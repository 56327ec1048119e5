"""DHCP Unique Identifiers (RFC 8415 Section 11)."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from .types import (
    Buffer,
    BufferTooShortError,
    DecodeError,
    HWType,
    OpenIntEnum,
    format_hwaddr,
)


class DUIDType(OpenIntEnum):
    """The DUID type."""

    LLT = 1
    EN = 2
    LL = 3
    UUID = 4

    def __str__(self):
        return _DUID_NAMES.get(int(self), "unknown")


_DUID_NAMES = {1: "DUID-LLT", 2: "DUID-EN", 3: "DUID-LL", 4: "DUID-UUID"}


def _hex(data):
    return "0x" + data.hex() if data else ""


class DUID(ABC):
    """Base class of all DUIDs; every subclass exposes ``type_code``."""

    type_code: DUIDType

    def to_bytes(self):
        """Serialize the DUID, type code included."""
        return struct.pack(">H", int(self.type_code)) + self._payload()

    @abstractmethod
    def _payload(self):
        """Bytes following the type code."""

    @classmethod
    @abstractmethod
    def from_payload(cls, data):
        """Parse the bytes following the type code."""


@dataclass
class DUIDLLT(DUID):
    """Link-layer address plus time."""

    hw_type: HWType = HWType.ETHERNET
    time: int = 0
    link_layer_addr: bytes = b""

    type_code: ClassVar[DUIDType] = DUIDType.LLT

    def __post_init__(self):
        self.hw_type = HWType(self.hw_type)
        self.link_layer_addr = bytes(self.link_layer_addr)

    def _payload(self):
        return struct.pack(">HI", int(self.hw_type), self.time) + self.link_layer_addr

    @classmethod
    def from_payload(cls, data):
        buf = Buffer(data)
        hw_type = HWType(buf.read16())
        time = buf.read32()
        addr = buf.read_all()
        buf.finish()
        return cls(hw_type, time, addr)

    def __str__(self):
        return (
            f"DUID-LLT{{HWType={self.hw_type} "
            f"HWAddr={format_hwaddr(self.link_layer_addr)} Time={self.time}}}"
        )


@dataclass
class DUIDLL(DUID):
    """Link-layer address."""

    hw_type: HWType = HWType.ETHERNET
    link_layer_addr: bytes = b""

    type_code: ClassVar[DUIDType] = DUIDType.LL

    def __post_init__(self):
        self.hw_type = HWType(self.hw_type)
        self.link_layer_addr = bytes(self.link_layer_addr)

    def _payload(self):
        return struct.pack(">H", int(self.hw_type)) + self.link_layer_addr

    @classmethod
    def from_payload(cls, data):
        buf = Buffer(data)
        hw_type = HWType(buf.read16())
        addr = buf.read_all()
        buf.finish()
        return cls(hw_type, addr)

    def __str__(self):
        return f"DUID-LL{{HWType={self.hw_type} HWAddr={format_hwaddr(self.link_layer_addr)}}}"


@dataclass
class DUIDEN(DUID):
    """Enterprise number plus identifier."""

    enterprise_number: int = 0
    enterprise_identifier: bytes = b""

    type_code: ClassVar[DUIDType] = DUIDType.EN

    def __post_init__(self):
        self.enterprise_identifier = bytes(self.enterprise_identifier)

    def _payload(self):
        return struct.pack(">I", self.enterprise_number) + self.enterprise_identifier

    @classmethod
    def from_payload(cls, data):
        buf = Buffer(data)
        number = buf.read32()
        ident = buf.read_all()
        buf.finish()
        return cls(number, ident)

    def __str__(self):
        ident = self.enterprise_identifier.decode("utf-8", "backslashreplace")
        return f"DUID-EN{{EnterpriseNumber={self.enterprise_number} EnterpriseIdentifier={ident}}}"


@dataclass
class DUIDUUID(DUID):
    """UUID-based DUID (RFC 6355)."""

    uuid: bytes = bytes(16)

    type_code: ClassVar[DUIDType] = DUIDType.UUID

    def __post_init__(self):
        self.uuid = bytes(self.uuid)
        if len(self.uuid) != 16:
            raise ValueError(f"UUID must be exactly 16 bytes, got {len(self.uuid)}")

    def _payload(self):
        return self.uuid

    @classmethod
    def from_payload(cls, data):
        if len(data) != 16:
            raise DecodeError(
                f"buffer is length {len(data)}, DUID-UUID must be exactly 16 bytes"
            )
        return cls(bytes(data))

    def __str__(self):
        return f"DUID-UUID{{{_hex(self.uuid)}}}"


@dataclass
class DUIDOpaque(DUID):
    """A DUID of a type without a dedicated structure."""

    type_code: DUIDType
    data: bytes = b""

    def __post_init__(self):
        self.type_code = DUIDType(self.type_code)
        self.data = bytes(self.data)

    def _payload(self):
        return self.data

    @classmethod
    def from_payload(cls, data, *, type_code=0):
        return cls(type_code, bytes(data))

    def __str__(self):
        return f"DUID-Opaque{{Type={int(self.type_code)} Data={_hex(self.data)}}}"


_PARSERS = {
    DUIDType.LLT: DUIDLLT,
    DUIDType.LL: DUIDLL,
    DUIDType.EN: DUIDEN,
    DUIDType.UUID: DUIDUUID,
}


def duid_from_bytes(data):
    """Parse a DUID, type code included."""
    buf = Buffer(data)
    if not buf.has(2):
        raise BufferTooShortError(f"have {buf.remaining()} bytes, want 2 bytes")
    code = DUIDType(buf.read16())
    payload = buf.read_all()
    parser = _PARSERS.get(code)
    if parser is None:
        return DUIDOpaque.from_payload(payload, type_code=code)
    return parser.from_payload(payload)