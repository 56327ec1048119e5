"""Wire-level primitives: option codes, IANA enumerations and a big-endian reader."""

from __future__ import annotations

import struct
from enum import IntEnum


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded."""


class BufferTooShortError(DecodeError):
    """Raised when a read needs more bytes than remain."""


class UnreadBytesError(DecodeError):
    """Raised when bytes are left over after decoding."""


class OpenIntEnum(IntEnum):
    """An IntEnum that also accepts 16-bit values without a named member."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 0xFFFF:
            member = int.__new__(cls, value)
            member._name_ = f"UNKNOWN_{value}"
            member._value_ = value
            return member
        return None

    def __format__(self, spec):
        if spec and spec[-1] in "bcdoxXn":
            return int.__format__(int(self), spec)
        return format(str(self), spec)


class OptionCode(OpenIntEnum):
    """A DHCPv6 option code."""

    CLIENT_ID = 1
    SERVER_ID = 2
    IANA = 3
    IATA = 4
    IAADDR = 5
    ORO = 6
    PREFERENCE = 7
    ELAPSED_TIME = 8
    RELAY_MSG = 9
    AUTH = 11
    UNICAST = 12
    STATUS_CODE = 13
    RAPID_COMMIT = 14
    USER_CLASS = 15
    VENDOR_CLASS = 16
    VENDOR_OPTS = 17
    INTERFACE_ID = 18
    RECONF_MSG = 19
    RECONF_ACCEPT = 20
    SIP_SERVERS_DOMAIN_NAME_LIST = 21
    SIP_SERVERS_IPV6_ADDRESS_LIST = 22
    DNS_RECURSIVE_NAME_SERVER = 23
    DOMAIN_SEARCH_LIST = 24
    IAPD = 25
    IAPREFIX = 26
    INFORMATION_REFRESH_TIME = 32
    REMOTE_ID = 37
    FQDN = 39
    NTP_SERVER = 56
    BOOTFILE_URL = 59
    BOOTFILE_PARAM = 60
    CLIENT_ARCH_TYPE = 61
    NII = 62
    CLIENT_LINK_LAYER_ADDR = 79
    DHCPV4_MSG = 87
    DHCP4O_DHCP6_SERVER = 88
    FOUR_RD = 97
    FOUR_RD_MAP_RULE = 98
    FOUR_RD_NON_MAP_RULE = 99
    RELAY_PORT = 135

    def __str__(self):
        return _OPTION_NAMES.get(int(self), "unknown")


class HWType(OpenIntEnum):
    """An ARP hardware type."""

    ETHERNET = 1
    EXPERIMENTAL_ETHERNET = 2
    AX25 = 3
    PRONET_TOKEN_RING = 4
    CHAOS = 5
    IEEE802 = 6
    ARCNET = 7
    HYPERCHANNEL = 8
    LANSTAR = 9
    FRAME_RELAY = 15
    ATM = 16
    HDLC = 17
    FIBRE_CHANNEL = 18
    SERIAL_LINE = 20
    INFINIBAND = 32

    def __str__(self):
        return _HWTYPE_NAMES.get(int(self), "unknown")


class ArchType(OpenIntEnum):
    """A client system architecture type (RFC 4578)."""

    INTEL_X86PC = 0
    NEC_PC98 = 1
    EFI_ITANIUM = 2
    DEC_ALPHA = 3
    ARC_X86 = 4
    INTEL_LEAN_CLIENT = 5
    EFI_IA32 = 6
    EFI_X86_64 = 7
    EFI_XSCALE = 8
    EFI_BC = 9
    EFI_ARM32 = 10
    EFI_ARM64 = 11

    def __str__(self):
        return _ARCH_NAMES.get(int(self), "unknown")


class StatusCode(OpenIntEnum):
    """A DHCPv6 status code."""

    SUCCESS = 0
    UNSPEC_FAIL = 1
    NO_ADDRS_AVAIL = 2
    NO_BINDING = 3
    NOT_ON_LINK = 4
    USE_MULTICAST = 5
    NO_PREFIX_AVAIL = 6
    UNKNOWN_QUERY_TYPE = 7
    MALFORMED_QUERY = 8
    NOT_CONFIGURED = 9
    NOT_ALLOWED = 10
    QUERY_TERMINATED = 11
    DATA_MISSING = 12
    CATCH_UP_COMPLETE = 13
    NOT_SUPPORTED = 14
    TLS_CONNECTION_REFUSED = 15
    ADDRESS_IN_USE = 16
    CONFIGURATION_CONFLICT = 17
    MISSING_BINDING_INFORMATION = 18
    OUTDATED_BINDING_INFORMATION = 19
    SERVER_SHUTTING_DOWN = 20
    DNS_UPDATE_NOT_SUPPORTED = 21
    EXCESSIVE_TIME_SKEW = 22

    def __str__(self):
        return _STATUS_NAMES.get(int(self), "unknown")


_OPTION_NAMES = {
    1: "Client ID",
    2: "Server ID",
    3: "IA_NA",
    4: "IA_TA",
    5: "IA IP Address",
    6: "Requested Options",
    7: "Preference",
    8: "Elapsed Time",
    9: "Relay Message",
    11: "Authentication",
    12: "Server Unicast",
    13: "Status Code",
    14: "Rapid Commit",
    15: "User Class",
    16: "Vendor Class",
    17: "Vendor-specific Information",
    18: "Interface-Id",
    19: "Reconfigure Message",
    20: "Reconfigure Accept",
    21: "SIP Servers Domain Name List",
    22: "SIP Servers IPv6 Address List",
    23: "DNS",
    24: "Domain Search List",
    25: "IA_PD",
    26: "IA Prefix",
    32: "Information Refresh Time",
    37: "Remote ID",
    39: "FQDN",
    56: "NTP Server",
    59: "Boot File URL",
    60: "Boot File Parameters",
    61: "Client System Architecture Type",
    62: "Client Network Interface Identifier",
    79: "Client Link-Layer Address",
    87: "DHCPv4 Message",
    88: "DHCPv4-over-DHCPv6 Server",
    97: "4RD",
    98: "4RD Map Rule",
    99: "4RD Non-Map Rule",
    135: "Relay Port",
}

_HWTYPE_NAMES = {
    1: "Ethernet",
    2: "Experimental Ethernet",
    3: "Amateur Radio AX.25",
    4: "Proteon ProNET Token Ring",
    5: "Chaos",
    6: "IEEE 802",
    7: "ARCNET",
    8: "Hyperchannel",
    9: "Lanstar",
    15: "Frame Relay",
    16: "ATM",
    17: "HDLC",
    18: "Fibre Channel",
    20: "Serial Line",
    32: "InfiniBand",
}

_ARCH_NAMES = {
    0: "Intel x86PC",
    1: "NEC/PC98",
    2: "EFI Itanium",
    3: "DEC Alpha",
    4: "Arc x86",
    5: "Intel Lean Client",
    6: "EFI IA32",
    7: "EFI x86-64",
    8: "EFI Xscale",
    9: "EFI BC",
    10: "EFI ARM32",
    11: "EFI ARM64",
}

_STATUS_NAMES = {
    0: "Success",
    1: "UnspecFail",
    2: "NoAddrsAvail",
    3: "NoBinding",
    4: "NotOnLink",
    5: "UseMulticast",
    6: "NoPrefixAvail",
    7: "UnknownQueryType",
    8: "MalformedQuery",
    9: "NotConfigured",
    10: "NotAllowed",
    11: "QueryTerminated",
    12: "DataMissing",
    13: "CatchUpComplete",
    14: "NotSupported",
    15: "TLSConnectionRefused",
    16: "AddressInUse",
    17: "ConfigurationConflict",
    18: "MissingBindingInformation",
    19: "OutdatedBindingInformation",
    20: "ServerShuttingDown",
    21: "DNSUpdateNotSupported",
    22: "ExcessiveTimeSkew",
}


def format_hwaddr(addr):
    """Format a hardware address as colon-separated lowercase hex."""
    return ":".join(f"{b:02x}" for b in addr)


class Buffer:
    """A big-endian reader over a byte string."""

    def __init__(self, data=b""):
        self._data = bytes(data)
        self._pos = 0

    def has(self, n):
        """Return whether at least n bytes remain."""
        return self.remaining() >= n

    def remaining(self):
        """Return the number of unread bytes."""
        return len(self._data) - self._pos

    def read_bytes(self, n):
        """Read exactly n bytes."""
        if not self.has(n):
            raise BufferTooShortError(f"have {self.remaining()} bytes, want {n} bytes")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def read8(self):
        return self.read_bytes(1)[0]

    def read16(self):
        return int.from_bytes(self.read_bytes(2), "big")

    def read32(self):
        return int.from_bytes(self.read_bytes(4), "big")

    def read_all(self):
        """Read every remaining byte."""
        chunk = self._data[self._pos:]
        self._pos = len(self._data)
        return chunk

    def finish(self):
        """Raise UnreadBytesError if any bytes were left unread."""
        if self.remaining():
            raise UnreadBytesError(f"have {self.remaining()} bytes unread")


class OptionCodes(list):
    """An ordered collection of option codes without duplicates."""

    def add(self, code):
        """Append code unless it is already present."""
        code = OptionCode(code)
        if code not in self:
            self.append(code)

    def to_bytes(self):
        return b"".join(struct.pack(">H", int(code)) for code in self)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        codes = cls()
        while buf.has(2):
            codes.add(buf.read16())
        buf.finish()
        return codes

    def __str__(self):
        return ", ".join(str(OptionCode(code)) for code in self)