"""Encoding and decoding of DHCPv6 options, DUIDs and identity associations."""

__version__ = "0.1.0"

__all__ = ["duid", "ia", "iputils", "options", "simple", "types"]