# dhcp6opts

A pure-Python library for building, encoding and decoding DHCPv6 options.

It covers:

- **DUIDs** (`dhcp6opts.duid`): `DUIDLLT`, `DUIDLL`, `DUIDEN`, `DUIDUUID`,
  and `DUIDOpaque` for unknown types. `duid_from_bytes` picks the right one.
- **Simple options** (`dhcp6opts.simple`): `OptClientID`, `OptServerID`,
  `OptRequestedOption`, `OptBootFileURL`, `OptBootFileParam`, `OptDNS`,
  `OptDHCP4oDHCP6Server`, `OptElapsedTime`, `OptInformationRefreshTime`,
  `OptStatusCode`, `OptRelayPort`, `OptRemoteID`, `OptInterfaceID`,
  `OptClientLinkLayerAddress`, `OptNetworkInterfaceID` and
  `OptClientArchType`.
- **Identity associations and 4RD** (`dhcp6opts.ia`): `OptIANA`,
  `OptIAAddress`, `OptIAPD`, `OptIAPrefix`, `Opt4RD`, `Opt4RDMapRule` and
  `Opt4RDNonMapRule`.
- **Wire primitives** (`dhcp6opts.types`): the `OptionCode`, `HWType`,
  `ArchType` and `StatusCode` enumerations, the big-endian `Buffer` reader,
  `OptionCodes`, and the `DecodeError` exceptions.
- **Interface helpers** (`dhcp6opts.iputils`): finding an interface's
  link-local or global IPv6 address, and getting a MAC address back from an
  EUI-64 address.

## Installation

```
pip install dhcp6opts
```

## Decoding

`Options.from_bytes` reads a stream of code/length/value options. Each
option is built from the class registered for its code. Codes with no
registered class become `OptionGeneric`, which keeps the raw payload.
Decoding raises `BufferTooShortError` if the data is truncated. It raises
`UnreadBytesError` if bytes are left over. Both are subclasses of
`DecodeError`, which is a `ValueError`.

```python
from dhcp6opts import simple  # registers the option classes
from dhcp6opts.options import Options
from dhcp6opts.types import OptionCode

data = bytes([0, 6, 0, 4, 0, 3, 0, 4])   # ORO asking for IA_NA and IA_TA
opts = Options.from_bytes(data)
oro = opts.get_one(OptionCode.ORO)
print(oro)                               # Requested Options: IA_NA, IA_TA
```

An option class is registered when its module is imported. Import
`dhcp6opts.simple` and `dhcp6opts.ia` before decoding if you want typed
options rather than `OptionGeneric`.

## DUIDs

```python
from dhcp6opts.duid import DUIDLL, duid_from_bytes
from dhcp6opts.types import HWType

duid = DUIDLL(hw_type=HWType.ETHERNET,
              link_layer_addr=bytes.fromhex("02005e000001"))
raw = duid.to_bytes()
assert duid_from_bytes(raw) == duid
print(duid)      # DUID-LL{HWType=Ethernet HWAddr=02:00:5e:00:00:01}
```

## Encoding

```python
from dhcp6opts.options import Options
from dhcp6opts.simple import OptBootFileURL, OptElapsedTime

opts = Options()
opts.add(OptBootFileURL("http://boot.example.com/image"))
opts.add(OptElapsedTime(0.02))   # seconds, or a datetime.timedelta
wire = opts.to_bytes()
```

Each option has `to_bytes()` for its payload and the class method
`from_bytes(data)` to parse one. `Options` is a list with `add`, `get`,
`get_one`, `delete` and `update`. Container options such as `OptIANA` and
`OptIAPD` hold nested option lists with lookups such as `addresses()`,
`one_address()`, `prefixes()` and `status()`. `Opt4RD` holds
`FourRDOptions` with `map_rules()` and `non_map_rule()`.

## Interface addresses

```python
from dhcp6opts.iputils import get_link_local_addr, get_mac_address_from_eui64

print(get_link_local_addr("eth0"))
print(get_mac_address_from_eui64("fe80::4a57:ddff:fe04:d8e9").hex(":"))
```

By default the address list comes from `psutil`, through
`interface_addresses`. To use your own, pass a callable as the `addresses`
argument. It takes the interface name and returns a list of `ipaddress`
addresses. If no address matches, a `LookupError` is raised.
`get_mac_address_from_eui64` raises `ValueError` for addresses that do not
embed an EUI-48.

## What this package does not do

It works on options only. It does not parse or build whole DHCPv6
messages or relay messages. It does not send or receive packets and has no
client or server. Options that are not listed above, such as FQDN, domain
search list, NTP server, relay message and DHCPv4 message, are decoded as
`OptionGeneric`.