"""Options with flat payloads: identifiers, addresses, times and small lists."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from datetime import timedelta

from .duid import DUID, duid_from_bytes
from .options import Option, format_duration, register_option
from .types import (
    ArchType,
    Buffer,
    HWType,
    OpenIntEnum,
    OptionCode,
    OptionCodes,
    StatusCode,
    format_hwaddr,
)

_IPV6_LEN = 16


def _hex(data):
    return "0x" + data.hex() if data else ""


def _byte_list(data):
    return "[" + " ".join(str(b) for b in data) + "]"


def _decode_text(data):
    return bytes(data).decode("utf-8", "surrogateescape")


def _encode_text(text):
    return text.encode("utf-8", "surrogateescape")


def _to_ipv6(addr):
    if isinstance(addr, (bytes, bytearray)):
        raw = bytes(addr)
        addr = ipaddress.IPv4Address(raw) if len(raw) == 4 else ipaddress.IPv6Address(raw)
    elif not isinstance(addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        addr = ipaddress.ip_address(addr)
    if addr.version == 4:
        return ipaddress.IPv6Address(f"::ffff:{addr}")
    return addr


def _as_timedelta(value):
    return value if isinstance(value, timedelta) else timedelta(seconds=value)


def _round_units(value, unit_us):
    us = value // timedelta(microseconds=1)
    quotient, rest = divmod(abs(us), unit_us)
    if 2 * rest >= unit_us:
        quotient += 1
    return quotient if us >= 0 else -quotient


def _read_ipv6_list(data):
    buf = Buffer(data)
    addrs = []
    while buf.has(_IPV6_LEN):
        addrs.append(ipaddress.IPv6Address(buf.read_bytes(_IPV6_LEN)))
    buf.finish()
    return addrs


def _ip_list_str(addrs):
    return "[" + " ".join(str(a) for a in addrs) + "]"


@register_option
@dataclass
class OptInterfaceID(Option):
    """Interface-Id option (RFC 3315 Section 22.18)."""

    id: bytes = b""

    code = OptionCode.INTERFACE_ID

    def __post_init__(self):
        self.id = bytes(self.id)

    def to_bytes(self):
        return self.id

    @classmethod
    def from_bytes(cls, data):
        return cls(bytes(data))

    def __str__(self):
        return f"{self.code}: {_byte_list(self.id)}"


@register_option
@dataclass
class OptBootFileURL(Option):
    """Boot File URL option (RFC 5970)."""

    url: str = ""

    code = OptionCode.BOOTFILE_URL

    def to_bytes(self):
        return _encode_text(self.url)

    @classmethod
    def from_bytes(cls, data):
        return cls(_decode_text(data))

    def __str__(self):
        return f"{self.code}: {self.url}"


@register_option
@dataclass
class OptBootFileParam(Option):
    """Boot File Parameters option (RFC 5970 Section 3.2)."""

    params: list = field(default_factory=list)

    code = OptionCode.BOOTFILE_PARAM

    def __post_init__(self):
        self.params = list(self.params)

    def to_bytes(self):
        parts = []
        for param in self.params:
            raw = _encode_text(param)
            if len(raw) >= 1 << 16:
                continue
            parts.append(struct.pack(">H", len(raw)) + raw)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        params = []
        while buf.has(2):
            length = buf.read16()
            params.append(_decode_text(buf.read_bytes(length)))
        buf.finish()
        return cls(params)

    def __str__(self):
        return f"{self.code}: [{' '.join(self.params)}]"


@register_option
@dataclass
class OptRelayPort(Option):
    """Relay Source Port option (RFC 8357)."""

    downstream_source_port: int = 0

    code = OptionCode.RELAY_PORT

    def to_bytes(self):
        return struct.pack(">H", self.downstream_source_port)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        port = buf.read16()
        buf.finish()
        return cls(port)

    def __str__(self):
        return f"{self.code}: {self.downstream_source_port}"


@register_option
@dataclass
class OptRemoteID(Option):
    """Remote ID option (RFC 4649)."""

    enterprise_number: int = 0
    remote_id: bytes = b""

    code = OptionCode.REMOTE_ID

    def __post_init__(self):
        self.remote_id = bytes(self.remote_id)

    def to_bytes(self):
        return struct.pack(">I", self.enterprise_number) + self.remote_id

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        number = buf.read32()
        remote = buf.read_all()
        buf.finish()
        return cls(number, remote)

    def __str__(self):
        return (
            f"{self.code}: {{EnterpriseNumber={self.enterprise_number} "
            f"RemoteID={_hex(self.remote_id)}}}"
        )


@register_option
@dataclass
class OptStatusCode(Option):
    """Status Code option (RFC 3315)."""

    status_code: StatusCode = StatusCode.SUCCESS
    status_message: str = ""

    code = OptionCode.STATUS_CODE

    def __post_init__(self):
        self.status_code = StatusCode(self.status_code)

    def to_bytes(self):
        return struct.pack(">H", int(self.status_code)) + _encode_text(self.status_message)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        status = StatusCode(buf.read16())
        message = _decode_text(buf.read_all())
        buf.finish()
        return cls(status, message)

    def __str__(self):
        return (
            f"{self.code}: {{Code={self.status_code} ({int(self.status_code)}); "
            f"Message={self.status_message}}}"
        )


@register_option
@dataclass
class OptClientID(Option):
    """Client Identifier option (RFC 3315 Section 22.2)."""

    duid: DUID

    code = OptionCode.CLIENT_ID

    def to_bytes(self):
        return self.duid.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        return cls(duid_from_bytes(data))

    def __str__(self):
        return f"{self.code}: {self.duid}"


@register_option
@dataclass
class OptServerID(Option):
    """Server Identifier option (RFC 3315 Section 22.1)."""

    duid: DUID

    code = OptionCode.SERVER_ID

    def to_bytes(self):
        return self.duid.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        return cls(duid_from_bytes(data))

    def __str__(self):
        return f"{self.code}: {self.duid}"


@register_option
@dataclass
class OptClientLinkLayerAddress(Option):
    """Client Link-Layer Address option (RFC 6939)."""

    link_layer_type: HWType = HWType.ETHERNET
    link_layer_address: bytes = b""

    code = OptionCode.CLIENT_LINK_LAYER_ADDR

    def __post_init__(self):
        self.link_layer_type = HWType(self.link_layer_type)
        self.link_layer_address = bytes(self.link_layer_address)

    def to_bytes(self):
        return struct.pack(">H", int(self.link_layer_type)) + self.link_layer_address

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        hw_type = HWType(buf.read16())
        addr = buf.read_all()
        buf.finish()
        return cls(hw_type, addr)

    def __str__(self):
        return (
            f"{self.code}: Type={self.link_layer_type} "
            f"LinkLayerAddress={format_hwaddr(self.link_layer_address)}"
        )


@register_option
@dataclass
class OptDNS(Option):
    """DNS Recursive Name Server option (RFC 3646)."""

    name_servers: list = field(default_factory=list)

    code = OptionCode.DNS_RECURSIVE_NAME_SERVER

    def __post_init__(self):
        self.name_servers = [_to_ipv6(a) for a in self.name_servers]

    def to_bytes(self):
        return b"".join(a.packed for a in self.name_servers)

    @classmethod
    def from_bytes(cls, data):
        return cls(_read_ipv6_list(data))

    def __str__(self):
        return f"{self.code}: {_ip_list_str(self.name_servers)}"


@register_option
@dataclass
class OptDHCP4oDHCP6Server(Option):
    """DHCPv4-over-DHCPv6 Server option (RFC 7341)."""

    servers: list = field(default_factory=list)

    code = OptionCode.DHCP4O_DHCP6_SERVER

    def __post_init__(self):
        self.servers = [_to_ipv6(a) for a in self.servers]

    def to_bytes(self):
        return b"".join(a.packed for a in self.servers)

    @classmethod
    def from_bytes(cls, data):
        return cls(_read_ipv6_list(data))

    def __str__(self):
        return f"{self.code}: {_ip_list_str(self.servers)}"


@register_option
@dataclass
class OptElapsedTime(Option):
    """Elapsed Time option (RFC 3315 Section 22.9), in hundredths of a second."""

    elapsed_time: timedelta = timedelta(0)

    code = OptionCode.ELAPSED_TIME

    def __post_init__(self):
        self.elapsed_time = _as_timedelta(self.elapsed_time)

    def to_bytes(self):
        return struct.pack(">H", _round_units(self.elapsed_time, 10_000) & 0xFFFF)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        units = buf.read16()
        buf.finish()
        return cls(timedelta(milliseconds=10 * units))

    def __str__(self):
        return f"{self.code}: {format_duration(self.elapsed_time)}"


@register_option
@dataclass
class OptInformationRefreshTime(Option):
    """Information Refresh Time option (RFC 8415 Section 21.23), in seconds."""

    refresh_time: timedelta = timedelta(0)

    code = OptionCode.INFORMATION_REFRESH_TIME

    def __post_init__(self):
        self.refresh_time = _as_timedelta(self.refresh_time)

    def to_bytes(self):
        return struct.pack(">I", _round_units(self.refresh_time, 1_000_000) & 0xFFFFFFFF)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        seconds = buf.read32()
        buf.finish()
        return cls(timedelta(seconds=seconds))

    def __str__(self):
        return f"{self.code}: {format_duration(self.refresh_time)}"


class NetworkInterfaceType(OpenIntEnum):
    """NIC type (RFC 4578 Section 2.2)."""

    LANDESK_NOPXE = 0
    PXE_GEN_I = 1
    PXE_GEN_II = 2
    UNDI_NOEFI = 3
    UNDI_EFI_GEN_I = 4
    UNDI_EFI_GEN_II = 5

    def __str__(self):
        name = _NII_NAMES.get(int(self))
        if name is None:
            return f"NetworkInterfaceType({int(self)}, unknown)"
        return name


_NII_NAMES = {
    0: "LANDesk service agent boot ROMs. No PXE",
    1: "First gen. PXE boot ROMs",
    2: "Second gen. PXE boot ROMs",
    3: "UNDI 32/64 bit. UEFI drivers, no UEFI runtime",
    4: "UNDI 32/64 bit. UEFI runtime 1st gen",
    5: "UNDI 32/64 bit. UEFI runtime 2nd gen",
}


@register_option
@dataclass
class OptNetworkInterfaceID(Option):
    """Client Network Interface Identifier (RFC 4578 Section 2.2, RFC 5970 Section 3.4)."""

    typ: NetworkInterfaceType = NetworkInterfaceType.LANDESK_NOPXE
    major: int = 0
    minor: int = 0

    code = OptionCode.NII

    def __post_init__(self):
        self.typ = NetworkInterfaceType(self.typ)

    def to_bytes(self):
        return struct.pack(">BBB", int(self.typ), self.major, self.minor)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        typ = NetworkInterfaceType(buf.read8())
        major = buf.read8()
        minor = buf.read8()
        buf.finish()
        return cls(typ, major, minor)

    def __str__(self):
        typ = NetworkInterfaceType(self.typ)
        return f"{self.code}: {typ} (Revision {self.major}.{self.minor})"


@register_option
@dataclass
class OptClientArchType(Option):
    """Client System Architecture Type option (RFC 5970)."""

    archs: list = field(default_factory=list)

    code = OptionCode.CLIENT_ARCH_TYPE

    def __post_init__(self):
        self.archs = [ArchType(a) for a in self.archs]

    def to_bytes(self):
        return b"".join(struct.pack(">H", int(a)) for a in self.archs)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        archs = []
        while buf.has(2):
            archs.append(ArchType(buf.read16()))
        buf.finish()
        return cls(archs)

    def __str__(self):
        return f"{self.code}: {', '.join(str(a) for a in self.archs)}"


@register_option
@dataclass
class OptRequestedOption(Option):
    """Option Request option (RFC 3315 Section 22.7)."""

    option_codes: OptionCodes = field(default_factory=OptionCodes)

    code = OptionCode.ORO

    def __post_init__(self):
        if not isinstance(self.option_codes, OptionCodes):
            self.option_codes = OptionCodes(OptionCode(c) for c in self.option_codes)

    def to_bytes(self):
        return self.option_codes.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        return cls(OptionCodes.from_bytes(data))

    def __str__(self):
        return f"{self.code}: {self.option_codes}"