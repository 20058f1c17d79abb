"""
BGP community parsing and symbolic name resolution (RFC 1997 layout).

A community is written "ASN:NUM", both halves 16 bit, and stored as the
32-bit value (ASN << 16) | NUM.
"""

import re
from typing import Dict, Mapping, Optional

from poolconfig.errors import ConsistencyError, MalformedValueError, RangeViolationError

MAX_HALF = 0xFFFF

_DIGITS = re.compile(r"[0-9]+")


def _parse_half(part: str, literal: str, what: str) -> int:
    if not _DIGITS.fullmatch(part):
        raise MalformedValueError(f"invalid {what} part {part!r} of community {literal!r}")
    value = int(part)
    if value > MAX_HALF:
        raise RangeViolationError(
            f"{what} part {part!r} of community {literal!r} doesn't fit in 16 bits"
        )
    return value


def parse_community(literal: str) -> int:
    """
    Parse community string to 32-bit integer

    Examples:
        >>> parse_community("64512:1234")
        4227859666
    """
    fields = literal.split(":")
    if len(fields) != 2:
        raise MalformedValueError(f"invalid community string {literal!r}, expected ASN:NUM")

    asn = _parse_half(fields[0], literal, "ASN")
    number = _parse_half(fields[1], literal, "community number")
    return (asn << 16) | number


def format_community(value: int) -> str:
    """Format 32-bit community value as "ASN:NUM"."""
    return f"{value >> 16}:{value & MAX_HALF}"


def is_community_literal(ref: str) -> bool:
    return ":" in ref


class CommunityResolver:
    """Symbolic community dictionary for one document."""

    def __init__(self, definitions: Optional[Mapping[str, str]] = None):
        self.communities: Dict[str, int] = {}
        for name, literal in (definitions or {}).items():
            try:
                self.communities[name] = parse_community(literal)
            except MalformedValueError as e:
                raise MalformedValueError(f"community {name!r}: {e}") from e
            except RangeViolationError as e:
                raise RangeViolationError(f"community {name!r}: {e}") from e

    def __len__(self) -> int:
        return len(self.communities)

    def resolve(self, ref: str) -> int:
        """Resolves a symbolic name or an "ASN:NUM" literal to its value."""
        if ref in self.communities:
            return self.communities[ref]
        if is_community_literal(ref):
            return parse_community(ref)
        if _DIGITS.fullmatch(ref):
            raise MalformedValueError(f"invalid community string {ref!r}, expected ASN:NUM")
        raise ConsistencyError(f"unknown community reference {ref!r}")
