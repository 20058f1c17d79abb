import re
from datetime import timedelta
from ipaddress import ip_address, ip_network
from typing import Any, Container, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from poolconfig.communities import CommunityResolver
from poolconfig.errors import (
    ConfigError,
    ConsistencyError,
    MalformedValueError,
    MissingFieldError,
    RangeViolationError,
)
from poolconfig.models import (
    DEFAULT_HOLD_TIME,
    DEFAULT_LOCAL_PREF,
    DEFAULT_PEER_PORT,
    MIN_HOLD_TIME,
    Advertisement,
    AdvertisementConfig,
    IPAddress,
    Network,
    Peer,
    PeerConfig,
    Pool,
    PoolConfig,
)
from poolconfig.ranges import RangeTracker
from poolconfig.utils import parse_duration_nanos

IPV4_LENGTH = 32


_CIDR = re.compile(r"([^/]+)/([0-9]+)")
_RANGE_ERRORS = {"greater_than", "greater_than_equal", "less_than", "less_than_equal"}

M = TypeVar("M", bound=BaseModel)


def parse_ip(text: str) -> IPAddress:
    """Parses an IP literal; IPv6 zone suffixes such as "%eth0" are rejected."""
    addr = ip_address(text)
    if getattr(addr, "scope_id", None):
        raise ValueError(f"zone not allowed in address {text!r}")
    return addr


def describe_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def load_model(model: Type[M], entry: Any, where: str) -> M:
    """Validates one raw entry; a null entry means every field is absent."""
    try:
        return model.model_validate({} if entry is None else entry)
    except ValidationError as e:
        if all(err["type"] in _RANGE_ERRORS for err in e.errors()):
            raise RangeViolationError(f"{where}: {describe_validation_error(e)}") from e
        raise MalformedValueError(f"{where}: {describe_validation_error(e)}") from e


def validate_peer(index: int, entry: Any) -> Peer:
    where = f"peer #{index}"
    raw = load_model(PeerConfig, entry, where)

    if raw.my_asn is None:
        raise MissingFieldError(f"{where}: missing my-asn")
    if raw.peer_asn is None:
        raise MissingFieldError(f"{where}: missing peer-asn")
    if raw.peer_address is None:
        raise MissingFieldError(f"{where}: missing peer-address")

    try:
        addr = parse_ip(raw.peer_address)
    except ValueError as e:
        raise MalformedValueError(f"{where}: invalid peer-address {raw.peer_address!r}") from e

    port = DEFAULT_PEER_PORT if raw.peer_port is None else raw.peer_port

    hold_time = DEFAULT_HOLD_TIME
    if raw.hold_time is not None:
        try:
            nanos = parse_duration_nanos(raw.hold_time)
        except ValueError as e:
            raise MalformedValueError(f"{where}: invalid hold-time {raw.hold_time!r}") from e
        # Zero disables keepalives; anything else must meet the BGP minimum.
        if nanos != 0 and nanos < MIN_HOLD_TIME // timedelta(microseconds=1) * 1000:
            raise RangeViolationError(
                f"{where}: invalid hold-time {raw.hold_time!r}, must be 0 or >= {MIN_HOLD_TIME.seconds}s"
            )
        hold_time = timedelta(microseconds=nanos // 1000)

    return Peer(my_asn=raw.my_asn, asn=raw.peer_asn, addr=addr, port=port, hold_time=hold_time)


def parse_cidr(value: str) -> Network:
    """Parses "address/prefix" into its canonical network, host bits cleared."""
    match = _CIDR.fullmatch(value.strip())
    if not match:
        raise MalformedValueError(f"invalid CIDR {value!r}, expected address/prefix-length")

    try:
        addr = parse_ip(match.group(1))
    except ValueError as e:
        raise MalformedValueError(f"invalid address in CIDR {value!r}: {e}") from e

    prefixlen = int(match.group(2))
    if prefixlen > addr.max_prefixlen:
        raise RangeViolationError(
            f"invalid prefix length {prefixlen} in CIDR {value!r}, must be <= {addr.max_prefixlen}"
        )
    return ip_network(f"{addr}/{prefixlen}", strict=False)


def family_length(cidrs: Sequence[Network]) -> int:
    """Full host prefix length for a pool; IPv4 when the pool is empty."""
    return min((cidr.max_prefixlen for cidr in cidrs), default=IPV4_LENGTH)


def validate_advertisement(
    index: int,
    entry: Any,
    pool_name: str,
    cidrs: Sequence[Network],
    communities: CommunityResolver,
) -> Advertisement:
    where = f'pool "{pool_name}" advertisement #{index}'
    raw = load_model(AdvertisementConfig, entry, where)

    full_length = family_length(cidrs)
    aggregation_length = full_length if raw.aggregation_length is None else raw.aggregation_length
    if aggregation_length > full_length:
        raise RangeViolationError(
            f"{where}: invalid aggregation-length {aggregation_length}, must be <= {full_length}"
        )
    for cidr in cidrs:
        if cidr.prefixlen > aggregation_length:
            raise ConsistencyError(
                f"{where}: incompatible aggregation-length {aggregation_length} for CIDR {cidr}"
            )

    values = set()
    for ref in raw.communities or ():
        try:
            values.add(communities.resolve(ref))
        except ConfigError as e:
            raise type(e)(f"{where}: {e}") from e

    local_pref = DEFAULT_LOCAL_PREF if raw.localpref is None else raw.localpref
    return Advertisement(
        aggregation_length=aggregation_length,
        local_pref=local_pref,
        communities=frozenset(values),
    )


def validate_pool(
    index: int,
    entry: Any,
    seen_names: Container[str],
    tracker: RangeTracker,
    communities: CommunityResolver,
) -> Pool:
    raw = load_model(PoolConfig, entry, f"pool #{index}")

    if raw.name is None or not raw.name.strip():
        raise MissingFieldError(f"pool #{index}: missing name")
    name = raw.name
    if name in seen_names:
        raise ConsistencyError(f'duplicate pool definition for "{name}"')

    cidrs = []
    for value in raw.cidr or ():
        try:
            cidr = parse_cidr(value)
        except ConfigError as e:
            raise type(e)(f'pool "{name}": {e}') from e
        tracker.admit(cidr, name)
        cidrs.append(cidr)

    advertisements = tuple(
        validate_advertisement(i, ad, name, cidrs, communities)
        for i, ad in enumerate(raw.advertisements or ())
    )

    return Pool(
        name=name,
        cidrs=tuple(cidrs),
        avoid_buggy_ips=bool(raw.avoid_buggy_ips),
        advertisements=advertisements,
    )
