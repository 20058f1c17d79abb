from dataclasses import dataclass, field
from datetime import timedelta
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

MAX_ASN = 2**32 - 1
MAX_PORT = 2**16 - 1
MAX_LOCAL_PREF = 2**32 - 1

DEFAULT_PEER_PORT = 179
DEFAULT_HOLD_TIME = timedelta(seconds=90)
MIN_HOLD_TIME = timedelta(seconds=3)
DEFAULT_LOCAL_PREF = 0

IPAddress = Union[IPv4Address, IPv6Address]
Network = Union[IPv4Network, IPv6Network]


# Raw document, as written. Absent keys stay None until a validator
# substitutes the default.


class RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class PeerConfig(RawModel):
    my_asn: Optional[int] = Field(default=None, alias="my-asn", strict=True, ge=0, le=MAX_ASN)
    peer_asn: Optional[int] = Field(default=None, alias="peer-asn", strict=True, ge=0, le=MAX_ASN)
    peer_address: Optional[str] = Field(default=None, alias="peer-address")
    peer_port: Optional[int] = Field(default=None, alias="peer-port", strict=True, ge=0, le=MAX_PORT)
    hold_time: Optional[str] = Field(default=None, alias="hold-time")


class AdvertisementConfig(RawModel):
    aggregation_length: Optional[int] = Field(default=None, alias="aggregation-length", strict=True, ge=0)
    localpref: Optional[int] = Field(default=None, strict=True, ge=0, le=MAX_LOCAL_PREF)
    communities: Optional[List[str]] = None


class PoolConfig(RawModel):
    name: Optional[str] = None
    cidr: Optional[List[str]] = None
    avoid_buggy_ips: Optional[bool] = Field(default=None, alias="avoid-buggy-ips")
    # Entries are validated one by one so errors can name the index.
    advertisements: Optional[List[Any]] = None


class DocumentConfig(RawModel):
    peers: Optional[List[Any]] = None
    communities: Optional[Dict[str, str]] = None
    address_pools: Optional[List[Any]] = Field(default=None, alias="address-pools")


# Validated model handed to the announcer.


@dataclass(frozen=True)
class Peer:
    my_asn: int
    asn: int
    addr: IPAddress
    port: int = DEFAULT_PEER_PORT
    hold_time: timedelta = DEFAULT_HOLD_TIME


@dataclass(frozen=True)
class Advertisement:
    aggregation_length: int
    local_pref: int = DEFAULT_LOCAL_PREF
    communities: FrozenSet[int] = frozenset()


@dataclass(frozen=True)
class Pool:
    name: str
    cidrs: Tuple[Network, ...] = ()
    avoid_buggy_ips: bool = False
    advertisements: Tuple[Advertisement, ...] = ()


@dataclass(frozen=True)
class Config:
    peers: Tuple[Peer, ...] = ()
    pools: Mapping[str, Pool] = field(default_factory=lambda: MappingProxyType({}))
