"""Identity association options (IA_NA, IA_PD, addresses, prefixes) and 4RD options."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from datetime import timedelta

from .options import Option, Options, format_duration, register_option
from .simple import OptStatusCode, _as_timedelta, _round_units, _to_ipv6
from .types import Buffer, DecodeError, OptionCode

_IPV4_LEN = 4
_IPV6_LEN = 16
_WKP_AUTHORIZED_MASK = 1 << 7
_HUB_AND_SPOKE_MASK = 1 << 7
_TRAFFIC_CLASS_MASK = 1 << 0


def encode_seconds(seconds):
    """Encode a lifetime as 32-bit whole seconds, rounded to the nearest second."""
    value = _as_timedelta(seconds)
    return struct.pack(">I", _round_units(value, 1_000_000) & 0xFFFFFFFF)


def decode_seconds(buf):
    """Read a 32-bit lifetime in seconds from a Buffer."""
    return timedelta(seconds=buf.read32())


def _addr6(value):
    if value is None:
        return ipaddress.IPv6Address(0)
    return _to_ipv6(value)


def _show_ip(addr):
    mapped = addr.ipv4_mapped
    return str(mapped) if mapped is not None else str(addr)


def _ia_id(value):
    raw = bytes(value)
    if len(raw) != 4:
        raise ValueError(f"IAID must be exactly 4 bytes, got {len(raw)}")
    return raw


def _iaid_str(ia_id):
    return "0x" + ia_id.hex()


def _status(options):
    opt = options.get_one(OptionCode.STATUS_CODE)
    return opt if isinstance(opt, OptStatusCode) else None


def _typed(options, cls):
    return [opt for opt in options if isinstance(opt, cls)]


class _Suboptions(Options):
    def __str__(self):
        return "{" + super().__str__() + "}"


class AddressOptions(_Suboptions):
    """Options valid inside an IA Address option."""

    def status(self):
        """Return the status code option, or None."""
        return _status(self)


class IdentityOptions(_Suboptions):
    """Options valid inside IA_NA and IA_TA options."""

    def addresses(self):
        """Return the addresses assigned to the identity."""
        return _typed(self.get(OptionCode.IAADDR), OptIAAddress)

    def one_address(self):
        """Return the first assigned address, or None."""
        addrs = self.addresses()
        return addrs[0] if addrs else None

    def status(self):
        """Return the status code option, or None."""
        return _status(self)


class PrefixOptions(_Suboptions):
    """Options valid inside an IA Prefix option."""

    def status(self):
        """Return the status code option, or None."""
        return _status(self)


class PDOptions(_Suboptions):
    """Options valid inside an IA_PD option."""

    def prefixes(self):
        """Return the delegated prefixes."""
        return _typed(self.get(OptionCode.IAPREFIX), OptIAPrefix)

    def status(self):
        """Return the status code option, or None."""
        return _status(self)


class FourRDOptions(_Suboptions):
    """Options encapsulated in the 4RD option."""

    def map_rules(self):
        """Return the 4RD map rules."""
        return _typed(self.get(OptionCode.FOUR_RD_MAP_RULE), Opt4RDMapRule)

    def non_map_rule(self):
        """Return the 4RD non-map rule, or None."""
        opt = self.get_one(OptionCode.FOUR_RD_NON_MAP_RULE)
        return opt if isinstance(opt, Opt4RDNonMapRule) else None


@register_option
@dataclass
class OptIAAddress(Option):
    """IA Address option (RFC 8415 Section 21.6)."""

    ipv6_addr: ipaddress.IPv6Address = ipaddress.IPv6Address(0)
    preferred_lifetime: timedelta = timedelta(0)
    valid_lifetime: timedelta = timedelta(0)
    options: AddressOptions = field(default_factory=AddressOptions)

    code = OptionCode.IAADDR

    def __post_init__(self):
        self.ipv6_addr = _addr6(self.ipv6_addr)
        self.preferred_lifetime = _as_timedelta(self.preferred_lifetime)
        self.valid_lifetime = _as_timedelta(self.valid_lifetime)
        if not isinstance(self.options, AddressOptions):
            self.options = AddressOptions(self.options)

    def to_bytes(self):
        return (
            self.ipv6_addr.packed
            + encode_seconds(self.preferred_lifetime)
            + encode_seconds(self.valid_lifetime)
            + self.options.to_bytes()
        )

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        addr = ipaddress.IPv6Address(buf.read_bytes(_IPV6_LEN))
        preferred = decode_seconds(buf)
        valid = decode_seconds(buf)
        options = AddressOptions.from_bytes(buf.read_all())
        buf.finish()
        return cls(addr, preferred, valid, options)

    def _describe(self, options_text):
        return (
            f"{self.code}: {{IP={_show_ip(self.ipv6_addr)} "
            f"PreferredLifetime={format_duration(self.preferred_lifetime)} "
            f"ValidLifetime={format_duration(self.valid_lifetime)} Options={options_text}}}"
        )

    def __str__(self):
        return self._describe(str(self.options))

    def long_string(self, indent=0):
        return self._describe(self.options.long_string(indent))


class _IdentityAssociation(Option):
    """Shared layout of IA_NA and IA_PD: IAID, T1, T2 and sub-options."""

    _options_type = Options

    def _normalize(self):
        self.ia_id = _ia_id(self.ia_id)
        self.t1 = _as_timedelta(self.t1)
        self.t2 = _as_timedelta(self.t2)
        if not isinstance(self.options, self._options_type):
            self.options = self._options_type(self.options)

    def to_bytes(self):
        return (
            self.ia_id
            + encode_seconds(self.t1)
            + encode_seconds(self.t2)
            + self.options.to_bytes()
        )

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        ia_id = buf.read_bytes(4)
        t1 = decode_seconds(buf)
        t2 = decode_seconds(buf)
        options = cls._options_type.from_bytes(buf.read_all())
        buf.finish()
        return cls(ia_id, t1, t2, options)

    def _head(self):
        return (
            f"IAID={_iaid_str(self.ia_id)} T1={format_duration(self.t1)} "
            f"T2={format_duration(self.t2)}"
        )

    def __str__(self):
        return f"{self.code}: {{{self._head()} Options={self.options}}}"

    def long_string(self, indent=0):
        return f"{self.code}: {self._head()} Options={self.options.long_string(indent)}"


@register_option
@dataclass(eq=True)
class OptIANA(_IdentityAssociation):
    """Identity Association for Non-temporary Addresses option."""

    ia_id: bytes = bytes(4)
    t1: timedelta = timedelta(0)
    t2: timedelta = timedelta(0)
    options: IdentityOptions = field(default_factory=IdentityOptions)

    code = OptionCode.IANA
    _options_type = IdentityOptions

    def __post_init__(self):
        self._normalize()

    __str__ = _IdentityAssociation.__str__


@register_option
@dataclass(eq=True)
class OptIAPD(_IdentityAssociation):
    """Identity Association for Prefix Delegation option (RFC 3633 Section 9)."""

    ia_id: bytes = bytes(4)
    t1: timedelta = timedelta(0)
    t2: timedelta = timedelta(0)
    options: PDOptions = field(default_factory=PDOptions)

    code = OptionCode.IAPD
    _options_type = PDOptions

    def __post_init__(self):
        self._normalize()

    __str__ = _IdentityAssociation.__str__


def _prefix6(value):
    if value is None or isinstance(value, ipaddress.IPv6Interface):
        return value
    return ipaddress.IPv6Interface(value)


@register_option
@dataclass
class OptIAPrefix(Option):
    """IA Prefix option (RFC 3633 Section 10)."""

    preferred_lifetime: timedelta = timedelta(0)
    valid_lifetime: timedelta = timedelta(0)
    prefix: ipaddress.IPv6Interface | None = None
    options: PrefixOptions = field(default_factory=PrefixOptions)

    code = OptionCode.IAPREFIX

    def __post_init__(self):
        self.preferred_lifetime = _as_timedelta(self.preferred_lifetime)
        self.valid_lifetime = _as_timedelta(self.valid_lifetime)
        self.prefix = _prefix6(self.prefix)
        if not isinstance(self.options, PrefixOptions):
            self.options = PrefixOptions(self.options)

    def to_bytes(self):
        if self.prefix is None:
            head = bytes(1 + _IPV6_LEN)
        else:
            head = bytes([self.prefix.network.prefixlen]) + self.prefix.ip.packed
        return (
            encode_seconds(self.preferred_lifetime)
            + encode_seconds(self.valid_lifetime)
            + head
            + self.options.to_bytes()
        )

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        preferred = decode_seconds(buf)
        valid = decode_seconds(buf)
        length = buf.read8()
        raw = buf.read_bytes(_IPV6_LEN)
        if length > 128:
            raise DecodeError(f"invalid IPv6 prefix length {length}")
        prefix = None
        if length:
            prefix = ipaddress.IPv6Interface((int.from_bytes(raw, "big"), length))
        options = PrefixOptions.from_bytes(buf.read_all())
        buf.finish()
        return cls(preferred, valid, prefix, options)

    def __str__(self):
        return (
            f"{self.code}: {{PreferredLifetime={format_duration(self.preferred_lifetime)}, "
            f"ValidLifetime={format_duration(self.valid_lifetime)}, "
            f"Prefix={self.prefix}, Options={self.options}}}"
        )


@register_option
@dataclass
class Opt4RD(Option):
    """4RD option (RFC 7600), a container for 4RD rule options."""

    options: FourRDOptions = field(default_factory=FourRDOptions)

    code = OptionCode.FOUR_RD

    def __post_init__(self):
        if not isinstance(self.options, FourRDOptions):
            self.options = FourRDOptions(self.options)

    def to_bytes(self):
        return self.options.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        return cls(FourRDOptions.from_bytes(data))

    def __str__(self):
        return f"{self.code}: {{Options={Options.__str__(self.options)}}}"

    def long_string(self, indent=0):
        return f"{self.code}: Options={self.options.long_string(indent)}"


@register_option
@dataclass
class Opt4RDMapRule(Option):
    """4RD Mapping Rule option (RFC 7600 Section 4.9)."""

    prefix4: ipaddress.IPv4Interface = ipaddress.IPv4Interface("0.0.0.0/0")
    prefix6: ipaddress.IPv6Interface = ipaddress.IPv6Interface("::/0")
    ea_bits_length: int = 0
    wkp_authorized: bool = False

    code = OptionCode.FOUR_RD_MAP_RULE

    def __post_init__(self):
        if not isinstance(self.prefix4, ipaddress.IPv4Interface):
            self.prefix4 = ipaddress.IPv4Interface(self.prefix4)
        if not isinstance(self.prefix6, ipaddress.IPv6Interface):
            self.prefix6 = ipaddress.IPv6Interface(self.prefix6)

    def to_bytes(self):
        flags = _WKP_AUTHORIZED_MASK if self.wkp_authorized else 0
        return (
            bytes([
                self.prefix4.network.prefixlen,
                self.prefix6.network.prefixlen,
                self.ea_bits_length,
                flags,
            ])
            + self.prefix4.ip.packed
            + self.prefix6.ip.packed
        )

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        len4 = buf.read8()
        len6 = buf.read8()
        ea_bits = buf.read8()
        wkp = bool(buf.read8() & _WKP_AUTHORIZED_MASK)
        raw4 = buf.read_bytes(_IPV4_LEN)
        raw6 = buf.read_bytes(_IPV6_LEN)
        buf.finish()
        if len4 > 32:
            raise DecodeError(f"invalid IPv4 prefix length {len4}")
        if len6 > 128:
            raise DecodeError(f"invalid IPv6 prefix length {len6}")
        prefix4 = ipaddress.IPv4Interface((int.from_bytes(raw4, "big"), len4))
        prefix6 = ipaddress.IPv6Interface((int.from_bytes(raw6, "big"), len6))
        return cls(prefix4, prefix6, ea_bits, wkp)

    def __str__(self):
        return (
            f"{self.code}: {{Prefix4={self.prefix4}, Prefix6={self.prefix6}, "
            f"EA-Bits={self.ea_bits_length}, "
            f"WKPAuthorized={str(self.wkp_authorized).lower()}}}"
        )


@register_option
@dataclass
class Opt4RDNonMapRule(Option):
    """4RD parameters other than mapping rules (RFC 7600 Section 4.9)."""

    hub_and_spoke: bool = False
    traffic_class: int | None = None
    domain_pmtu: int = 0

    code = OptionCode.FOUR_RD_NON_MAP_RULE

    def to_bytes(self):
        flags = _HUB_AND_SPOKE_MASK if self.hub_and_spoke else 0
        traffic = 0
        if self.traffic_class is not None:
            flags |= _TRAFFIC_CLASS_MASK
            traffic = self.traffic_class
        return struct.pack(">BBH", flags, traffic, self.domain_pmtu)

    @classmethod
    def from_bytes(cls, data):
        buf = Buffer(data)
        flags = buf.read8()
        traffic = buf.read8()
        pmtu = buf.read16()
        buf.finish()
        return cls(
            hub_and_spoke=bool(flags & _HUB_AND_SPOKE_MASK),
            traffic_class=traffic if flags & _TRAFFIC_CLASS_MASK else None,
            domain_pmtu=pmtu,
        )

    def __str__(self):
        traffic = "false" if self.traffic_class is None else str(self.traffic_class)
        return (
            f"{self.code}: {{HubAndSpoke={str(self.hub_and_spoke).lower()}, "
            f"TrafficClass={traffic}, DomainPMTU={self.domain_pmtu}}}"
        )