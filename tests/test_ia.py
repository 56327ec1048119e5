from datetime import timedelta
from ipaddress import IPv4Interface, IPv6Address, IPv6Interface

import pytest

from dhcp6opts.ia import (
    AddressOptions,
    FourRDOptions,
    IdentityOptions,
    Opt4RD,
    Opt4RDMapRule,
    Opt4RDNonMapRule,
    OptIAAddress,
    OptIANA,
    OptIAPD,
    OptIAPrefix,
    PDOptions,
    PrefixOptions,
    decode_seconds,
    encode_seconds,
)
from dhcp6opts.options import Options
from dhcp6opts.simple import OptElapsedTime, OptStatusCode
from dhcp6opts.types import (
    Buffer,
    BufferTooShortError,
    DecodeError,
    OptionCode,
    StatusCode,
    UnreadBytesError,
)

IPV6 = bytes([0x24, 1, 0xDB, 0, 0x30, 0x10, 0xC0, 0x8F, 0xFA, 0xCE, 0, 0, 0, 0x44, 0, 0])
IAID1 = b"\x01\x00\x00\x00"
IAID2 = b"\x01\x02\x03\x04"


def sec(n):
    return n.to_bytes(4, "big")


def s(n):
    return timedelta(seconds=n)


IAADDR = b"\x00\x05\x00\x18" + IPV6 + sec(2) + sec(4)


def _addr():
    return OptIAAddress(IPv6Address(IPV6), s(2), s(4))


# --- encode/decode seconds ---

def test_encode_seconds_whole():
    assert encode_seconds(s(3)) == b"\x00\x00\x00\x03"


def test_encode_seconds_rounds_half_up():
    assert encode_seconds(timedelta(milliseconds=1500)) == b"\x00\x00\x00\x02"
    assert encode_seconds(timedelta(milliseconds=1400)) == b"\x00\x00\x00\x01"


def test_decode_seconds():
    buf = Buffer(b"\xaa\xbb\xcc\xdd")
    assert decode_seconds(buf) == timedelta(seconds=0xAABBCCDD)
    assert buf.remaining() == 0


def test_decode_seconds_too_short():
    with pytest.raises(BufferTooShortError):
        decode_seconds(Buffer(b"\x00\x01"))


# --- IA_NA ---

IANA_ONE = b"\x00\x03\x00\x28" + IAID1 + sec(1) + sec(2) + IAADDR
IANA_TWO = IANA_ONE + b"\x00\x03\x00\x28" + IAID2 + sec(9) + sec(8) + IAADDR


@pytest.mark.parametrize(
    "buf, want",
    [
        (IANA_ONE, [OptIANA(IAID1, s(1), s(2), IdentityOptions([_addr()]))]),
        (
            IANA_TWO,
            [
                OptIANA(IAID1, s(1), s(2), IdentityOptions([_addr()])),
                OptIANA(IAID2, s(9), s(8), IdentityOptions([_addr()])),
            ],
        ),
        (b"", []),
    ],
)
def test_iana_parse_and_getter(buf, want):
    opts = Options.from_bytes(buf)
    assert opts.get(OptionCode.IANA) == want
    assert opts.get_one(OptionCode.IANA) == (want[0] if want else None)
    if want:
        assert Options(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf, error",
    [
        (b"\x00\x03\x00\x01\x00", DecodeError),
        (b"\x00\x03\x00\x08" + IAID1 + sec(1), BufferTooShortError),
        (
            b"\x00\x03\x00\x24" + IAID1 + sec(1) + sec(2)
            + b"\x00\x05\x00\x18" + IPV6 + b"\x00\x00\xb2\x7a",
            BufferTooShortError,
        ),
    ],
)
def test_iana_parse_errors(buf, error):
    with pytest.raises(error):
        Options.from_bytes(buf)


def test_iana_get_one_option():
    oaddr = OptIAAddress(IPv6Address("::1"))
    opt = OptIANA(options=IdentityOptions([OptStatusCode(), oaddr]))
    assert opt.options.one_address() is oaddr


def test_iana_add_option():
    opt = OptIANA()
    opt.options.add(OptElapsedTime(0))
    assert len(opt.options) == 1
    assert opt.options[0].code == OptionCode.ELAPSED_TIME


def test_iana_get_one_missing():
    opt = OptIANA(options=IdentityOptions([OptStatusCode(), OptIAAddress(IPv6Address("::1"))]))
    assert opt.options.get_one(OptionCode.DNS_RECURSIVE_NAME_SERVER) is None


def test_iana_delete_option():
    addr = OptIAAddress()
    status = OptStatusCode()
    first = OptIANA(options=IdentityOptions([status, addr, addr]))
    first.options.delete(OptionCode.IAADDR)
    assert first.options == [status]
    second = OptIANA(options=IdentityOptions([addr, status, addr]))
    second.options.delete(OptionCode.IAADDR)
    assert second.options == [status]


def test_iana_string():
    data = (
        IAID1 + sec(1) + sec(2) + b"\x00\x05\x00\x18" + IPV6
        + b"\x00\x00\xb2\x7a" + b"\x00\x00\xc0\x8a"
    )
    text = str(OptIANA.from_bytes(data))
    assert "IAID=0x01000000" in text
    assert "T1=1s T2=2s" in text
    assert "Options={" in text


def test_iana_long_string():
    opt = OptIANA(IAID1, s(1), s(2), IdentityOptions([_addr()]))
    assert opt.long_string(0).startswith("IA_NA: IAID=0x01000000 T1=1s T2=2s Options=[")


def test_iana_rejects_bad_iaid():
    with pytest.raises(ValueError):
        OptIANA(ia_id=b"\x01\x02")


# --- IA Address ---

@pytest.mark.parametrize(
    "buf, want",
    [
        (IAADDR, [_addr()]),
        (
            b"\x00\x05\x00\x20" + IPV6 + sec(2) + sec(4) + b"\x00\x0d\x00\x04\x00\x00OK",
            [
                OptIAAddress(
                    IPv6Address(IPV6), s(2), s(4),
                    AddressOptions([OptStatusCode(StatusCode.SUCCESS, "OK")]),
                )
            ],
        ),
        (IAADDR + IAADDR, [_addr(), _addr()]),
    ],
)
def test_iaaddress_parse_and_getter(buf, want):
    ident = IdentityOptions.from_bytes(buf)
    assert ident.addresses() == want
    assert ident.one_address() == want[0]
    assert IdentityOptions(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf, error",
    [
        (b"\x00\x03\x00\x01\x00", DecodeError),
        (b"\x00\x05\x00\x04\x00\x00\x00\x01", BufferTooShortError),
        (b"\x00\x05\x00\x1c" + IPV6 + sec(2) + sec(4) + b"\x00\x0d\x00\x01", BufferTooShortError),
    ],
)
def test_iaaddress_parse_errors(buf, error):
    with pytest.raises(error):
        IdentityOptions.from_bytes(buf)


def test_identity_options_empty():
    ident = IdentityOptions.from_bytes(b"")
    assert ident.addresses() == []
    assert ident.one_address() is None


def test_iaaddress_string():
    ip = bytes([0x24, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15])
    data = ip + sec(70) + sec(50) + b"\x00\x08\x00\x02\xaa\xbb"
    text = str(OptIAAddress.from_bytes(data))
    assert "IP=2401:203:405:607:809:a0b:c0d:e0f" in text
    assert "PreferredLifetime=1m10s" in text
    assert "ValidLifetime=50s" in text


# --- IA_PD ---

PREFIX_IN_PD = b"\x00\x1a\x00\x19" + sec(2) + sec(4) + bytes([36]) + bytes(15) + b"\x01"
IAPD_ONE = b"\x00\x19\x00\x29" + IAID1 + sec(1) + sec(2) + PREFIX_IN_PD
IAPD_TWO = IAPD_ONE + b"\x00\x19\x00\x29" + IAID2 + sec(5) + sec(6) + PREFIX_IN_PD


def _pd_prefix():
    return OptIAPrefix(s(2), s(4), IPv6Interface("::1/36"))


@pytest.mark.parametrize(
    "buf, want",
    [
        (IAPD_ONE, [OptIAPD(IAID1, s(1), s(2), PDOptions([_pd_prefix()]))]),
        (
            IAPD_TWO,
            [
                OptIAPD(IAID1, s(1), s(2), PDOptions([_pd_prefix()])),
                OptIAPD(IAID2, s(5), s(6), PDOptions([_pd_prefix()])),
            ],
        ),
        (b"", []),
    ],
)
def test_iapd_parse_and_getter(buf, want):
    opts = Options.from_bytes(buf)
    assert opts.get(OptionCode.IAPD) == want
    assert opts.get_one(OptionCode.IAPD) == (want[0] if want else None)
    if want:
        assert Options(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf, error",
    [
        (b"\x00\x19\x00\x01\x00", DecodeError),
        (b"\x00\x19\x00\x08" + IAID1 + sec(1), BufferTooShortError),
        (
            b"\x00\x19\x00\x24" + IAID1 + sec(1) + sec(2) + b"\x00\x1a\x00\x04" + sec(2),
            BufferTooShortError,
        ),
    ],
)
def test_iapd_parse_errors(buf, error):
    with pytest.raises(error):
        Options.from_bytes(buf)


def test_iapd_string():
    data = (
        IAID1 + sec(1) + sec(2) + b"\x00\x1a\x00\x19"
        + b"\xaa\xbb\xcc\xdd" + b"\xee\xff\x00\x11" + bytes([36]) + bytes(15) + b"\x01"
    )
    text = str(OptIAPD.from_bytes(data))
    assert "IAID=0x01000000" in text
    assert "T1=1s T2=2s" in text
    assert "Options={" in text


# --- IA Prefix ---

PFX16 = b"\x00\x1a\x00\x19" + sec(1) + sec(2) + bytes([16]) + IPV6
PFX_NET16 = IPv6Interface(f"{IPv6Address(IPV6)}/16")
PFX_NET32 = IPv6Interface(f"{IPv6Address(IPV6)}/32")


@pytest.mark.parametrize(
    "buf, want",
    [
        (PFX16, [OptIAPrefix(s(1), s(2), PFX_NET16)]),
        (
            b"\x00\x1a\x00\x19" + sec(1) + sec(2) + bytes([0]) + bytes(16),
            [OptIAPrefix(s(1), s(2), None)],
        ),
        (
            PFX16 + b"\x00\x1a\x00\x19" + sec(15) + sec(14) + bytes([32]) + IPV6,
            [OptIAPrefix(s(1), s(2), PFX_NET16), OptIAPrefix(s(15), s(14), PFX_NET32)],
        ),
    ],
)
def test_iaprefix_parse_and_getter(buf, want):
    pd = PDOptions.from_bytes(buf)
    assert pd.prefixes() == want
    assert PDOptions(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf, error",
    [
        (b"\x00\x03\x00\x01\x00", DecodeError),
        (b"\x00\x1a\x00\x08" + IAID1 + sec(1), BufferTooShortError),
        (b"\x00\x1a\x00\x1a" + sec(1) + sec(2) + bytes([8]) + IPV6 + b"\x00", UnreadBytesError),
    ],
)
def test_iaprefix_parse_errors(buf, error):
    with pytest.raises(error):
        PDOptions.from_bytes(buf)


def test_iaprefix_string():
    buf = sec(60) + sec(50) + bytes([36]) + b"\x20\x01\x0d\xb8" + bytes(12)
    text = str(OptIAPrefix.from_bytes(buf))
    assert "Prefix=2001:db8::/36" in text
    assert "PreferredLifetime=1m" in text
    assert "ValidLifetime=50s" in text


# --- Status on sub-option containers ---

STATUS_BUF = b"\x00\x0d\x00\x0f\x00\x05use multicast"
CONTAINERS = [IdentityOptions, AddressOptions, PDOptions, PrefixOptions]


@pytest.mark.parametrize("cls", CONTAINERS)
def test_status_parse_and_getter(cls):
    want = OptStatusCode(StatusCode.USE_MULTICAST, "use multicast")
    assert cls.from_bytes(STATUS_BUF).status() == want
    assert cls([want]).to_bytes() == STATUS_BUF


def test_status_absent():
    assert IdentityOptions.from_bytes(b"").status() is None
    assert AddressOptions.from_bytes(b"").status() is None
    assert PDOptions.from_bytes(b"").status() is None
    assert PrefixOptions.from_bytes(b"").status() is None


@pytest.mark.parametrize(
    "buf, error",
    [(b"\x00\x0d\x00\x01\x00", BufferTooShortError), (b"\x00\x0d\x00", UnreadBytesError)],
)
def test_status_parse_errors(buf, error):
    with pytest.raises(error):
        IdentityOptions.from_bytes(buf)
    with pytest.raises(error):
        AddressOptions.from_bytes(buf)
    with pytest.raises(error):
        PDOptions.from_bytes(buf)
    with pytest.raises(error):
        PrefixOptions.from_bytes(buf)


# --- 4RD ---

MAP_RULE_BODY = bytes([16, 16, 8, 0, 192, 168, 0, 1, 0xFE, 0x80]) + bytes(14)
MAP_RULE = b"\x00\x62\x00\x18" + MAP_RULE_BODY
MAP_RULE_WKP = b"\x00\x62\x00\x18" + bytes([16, 16, 8, 0x80, 192, 168, 0, 1, 0xFE, 0x80]) + bytes(14)
NON_MAP_4RD = b"\x00\x61\x00\x08\x00\x63\x00\x04\x80\x00\x05\xd4"


def _map_rule(wkp=False):
    return Opt4RDMapRule(
        IPv4Interface("192.168.0.1/16"), IPv6Interface("fe80::/16"), 8, wkp
    )


@pytest.mark.parametrize(
    "buf, want",
    [
        (b"\x00\x61\x00\x1c" + MAP_RULE, [Opt4RD(FourRDOptions([_map_rule()]))]),
        (
            b"\x00\x61\x00\x1c" + MAP_RULE + NON_MAP_4RD,
            [
                Opt4RD(FourRDOptions([_map_rule()])),
                Opt4RD(FourRDOptions([Opt4RDNonMapRule(hub_and_spoke=True, domain_pmtu=1492)])),
            ],
        ),
        (b"\x00\x61\x00\x00", [Opt4RD()]),
    ],
)
def test_4rd_parse_and_getter(buf, want):
    opts = Options.from_bytes(buf)
    assert opts.get(OptionCode.FOUR_RD) == want
    assert Options(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf, error",
    [
        (b"\x00\x61\x00\x01\x00", UnreadBytesError),
        (b"\x00\x61\x00\x06\x00\x62\x00\x04" + bytes([16, 16, 8, 0]), BufferTooShortError),
    ],
)
def test_4rd_parse_errors(buf, error):
    with pytest.raises(error):
        Options.from_bytes(buf)


@pytest.mark.parametrize(
    "buf, want",
    [(MAP_RULE, [_map_rule()]), (MAP_RULE_WKP, [_map_rule(True)])],
)
def test_4rd_map_rule_parse_and_getter(buf, want):
    frdo = FourRDOptions.from_bytes(buf)
    assert frdo.map_rules() == want
    assert FourRDOptions(want).to_bytes() == buf


@pytest.mark.parametrize(
    "buf",
    [b"\x00\x62\x00\x01\x00", b"\x00\x62\x00\x04" + bytes([16, 16, 8, 0])],
)
def test_4rd_map_rule_parse_errors(buf):
    with pytest.raises(BufferTooShortError):
        FourRDOptions.from_bytes(buf)


@pytest.mark.parametrize(
    "buf, want",
    [
        (b"\x00\x63\x00\x04\x80\x00\x05\xd4", Opt4RDNonMapRule(hub_and_spoke=True, domain_pmtu=1492)),
        (b"\x00\x63\x00\x04\x00\x00\x05\xd4", Opt4RDNonMapRule(domain_pmtu=1492)),
        (b"\x00\x63\x00\x04\x01\x01\x05\xd4", Opt4RDNonMapRule(traffic_class=1, domain_pmtu=1492)),
    ],
)
def test_4rd_non_map_rule_parse_and_getter(buf, want):
    frdo = FourRDOptions.from_bytes(buf)
    assert frdo.non_map_rule() == want
    assert FourRDOptions([want]).to_bytes() == buf


def test_4rd_non_map_rule_parse_error():
    with pytest.raises(BufferTooShortError):
        FourRDOptions.from_bytes(b"\x00\x63\x00\x01\x00")


def test_4rd_empty_getters():
    frdo = FourRDOptions()
    assert frdo.map_rules() == []
    assert frdo.non_map_rule() is None


def test_4rd_non_map_rule_string():
    text = str(Opt4RDNonMapRule(hub_and_spoke=True, traffic_class=120, domain_pmtu=9000))
    assert "HubAndSpoke=true" in text
    assert "TrafficClass=120" in text
    assert "DomainPMTU=9000" in text


def test_4rd_non_map_rule_string_without_traffic_class():
    assert "TrafficClass=false" in str(Opt4RDNonMapRule(domain_pmtu=1))


def test_4rd_map_rule_default_to_bytes():
    opt = Opt4RDMapRule(ea_bits_length=32, wkp_authorized=True)
    assert opt.to_bytes() == bytes([0, 0, 32, 0x80]) + bytes(20)


def test_4rd_map_rule_string():
    opt = Opt4RDMapRule(
        IPv4Interface("100.64.0.238/24"),
        IPv6Interface("2001:db8::1234:5678:0:aabb/80"),
        32,
        True,
    )
    text = str(opt)
    assert "WKPAuthorized=true" in text
    assert "Prefix6=2001:db8::1234:5678:0:aabb/80" in text
    assert "Prefix4=100.64.0.238/24" in text
    assert "EA-Bits=32" in text


def test_4rd_map_rule_rejects_bad_prefix_length():
    with pytest.raises(DecodeError):
        Opt4RDMapRule.from_bytes(bytes([40, 16, 8, 0]) + bytes(20))