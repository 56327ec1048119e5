"""Helpers for picking interface addresses and deriving MACs from EUI-64."""

from __future__ import annotations

import ipaddress
import socket

import psutil


def interface_addresses(ifname):
    """Return the IP addresses configured on the named interface."""
    try:
        entries = psutil.net_if_addrs()[ifname]
    except KeyError:
        raise LookupError(f"no such network interface: {ifname}") from None
    return [
        ipaddress.ip_address(entry.address.split("%", 1)[0])
        for entry in entries
        if entry.family in (socket.AF_INET, socket.AF_INET6)
    ]


def get_matching_addr(ifname, matches, addresses=None):
    """Return the first address of the interface accepted by ``matches``."""
    lister = addresses or interface_addresses
    for ip in lister(ifname):
        if matches(ip):
            return ip
    raise LookupError(f"no matching address found for interface {ifname}")


def _is_pure_ipv6(ip):
    return isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is None


def _is_link_local(ip):
    return _is_pure_ipv6(ip) and ip.is_link_local


def _is_global_unicast(ip):
    return _is_pure_ipv6(ip) and not (
        ip.is_unspecified or ip.is_loopback or ip.is_multicast or ip.is_link_local
    )


def get_link_local_addr(ifname, addresses=None):
    """Return a link-local IPv6 address of the interface."""
    return get_matching_addr(ifname, _is_link_local, addresses)


def get_global_addr(ifname, addresses=None):
    """Return a global unicast IPv6 address of the interface."""
    return get_matching_addr(ifname, _is_global_unicast, addresses)


def _to16(ip):
    if isinstance(ip, (bytes, bytearray)):
        if len(ip) == 16:
            return bytes(ip)
        if len(ip) == 4:
            return bytes(10) + b"\xff\xff" + bytes(ip)
        raise ValueError("IP address shorter than 16 bytes")
    addr = ipaddress.ip_address(ip)
    if addr.version == 4:
        return ipaddress.IPv6Address(f"::ffff:{addr}").packed
    return addr.packed


def get_mac_address_from_eui64(ip):
    """Return the MAC embedded in an EUI-64 interface identifier (EUI-48 only)."""
    raw = _to16(ip)
    if raw[11] != 0xFF or raw[12] != 0xFE:
        raise ValueError("IP address is not an EUI48 address")
    mac = bytearray(raw[8:11] + raw[13:16])
    mac[0] ^= 0x02
    return bytes(mac)