"""The option container and the generic option shared by every DHCPv6 option."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta

from .types import Buffer, OptionCode

_REGISTRY: dict[int, type] = {}

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def _fraction(value, unit):
    whole, part = divmod(value, unit)
    if not part:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{part:0{digits}d}".rstrip("0")


def format_duration(value):
    """Format a timedelta the way durations are conventionally shown, e.g. ``1m10s``."""
    ns = (value // timedelta(microseconds=1)) * _NS_PER_US
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < _NS_PER_S:
        if ns < _NS_PER_US:
            return f"{sign}{ns}ns"
        if ns < _NS_PER_MS:
            return f"{sign}{_fraction(ns, _NS_PER_US)}µs"
        return f"{sign}{_fraction(ns, _NS_PER_MS)}ms"
    hours, rest = divmod(ns, _NS_PER_HOUR)
    minutes, rest = divmod(rest, _NS_PER_MIN)
    seconds = _fraction(rest, _NS_PER_S)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


class Option(ABC):
    """Base class of every DHCPv6 option; each exposes ``code``."""

    code: OptionCode

    @abstractmethod
    def to_bytes(self):
        """Serialize the option payload, without code and length."""

    @classmethod
    @abstractmethod
    def from_bytes(cls, data):
        """Parse the option payload, without code and length."""

    def long_string(self, indent=0):
        """Return a possibly multi-line description of the option."""
        return str(self)


@dataclass
class OptionGeneric(Option):
    """An option whose payload is kept as raw bytes."""

    code: OptionCode
    data: bytes = b""

    def __post_init__(self):
        self.code = OptionCode(self.code)
        self.data = bytes(self.data)

    def to_bytes(self):
        return self.data

    @classmethod
    def from_bytes(cls, data, *, code=0):
        return cls(code, data)

    def __str__(self):
        return f"{self.code}: [{' '.join(str(b) for b in self.data)}]"


def register_option(cls):
    """Class decorator making ``parse_option`` build ``cls`` for its code."""
    _REGISTRY[int(cls.code)] = cls
    return cls


def parse_option(code, data):
    """Build the option registered for ``code``, or a generic one."""
    cls = _REGISTRY.get(int(code))
    if cls is None:
        return OptionGeneric(code, data)
    return cls.from_bytes(data)


class Options(list):
    """An ordered list of options."""

    def add(self, option):
        """Append an option."""
        self.append(option)

    def get(self, code):
        """Return every option with the given code."""
        return [opt for opt in self if opt.code == code]

    def get_one(self, code):
        """Return the first option with the given code, or None."""
        return next((opt for opt in self if opt.code == code), None)

    def delete(self, code):
        """Remove every option with the given code."""
        self[:] = [opt for opt in self if opt.code != code]

    def update(self, option):
        """Replace the first option with the same code, or append it."""
        for index, existing in enumerate(self):
            if existing.code == option.code:
                self[index] = option
                return
        self.append(option)

    def to_bytes(self):
        parts = []
        for opt in self:
            payload = opt.to_bytes()
            parts.append(struct.pack(">HH", int(opt.code), len(payload)) + payload)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data, parser=None):
        """Parse a sequence of code/length/payload options."""
        parser = parser or parse_option
        buf = Buffer(data)
        options = cls()
        while buf.has(4):
            code = OptionCode(buf.read16())
            length = buf.read16()
            options.append(parser(code, buf.read_bytes(length)))
        buf.finish()
        return options

    def long_string(self, indent=0):
        """Return a multi-line description, one option per line."""
        if not self:
            return "[]"
        pad = " " * (indent + 2)
        lines = [f"{pad}{opt.long_string(indent + 2)}" for opt in self]
        return "[\n" + "\n".join(lines) + "\n" + " " * indent + "]"

    def __str__(self):
        return "[" + " ".join(str(opt) for opt in self) + "]"