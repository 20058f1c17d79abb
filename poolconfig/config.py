import logging
import re
from os import PathLike
from types import MappingProxyType
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from poolconfig.communities import CommunityResolver
from poolconfig.errors import ConfigError, DecodeError, MalformedValueError
from poolconfig.models import (  # noqa: F401
    Advertisement,
    AdvertisementConfig,
    Config,
    DocumentConfig,
    Peer,
    PeerConfig,
    Pool,
    PoolConfig,
)
from poolconfig.ranges import RangeTracker
from poolconfig.validators import describe_validation_error, validate_peer, validate_pool

logger = logging.getLogger(__name__)

_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader that does not read "65000:10" as a base-60 integer."""


DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_INT_TAG, _FLOAT_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
DocumentLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(
        r"""^(?:[-+]?0b[0-1_]+
        |[-+]?0[0-7_]+
        |[-+]?(?:0|[1-9][0-9_]*)
        |[-+]?0x[0-9a-fA-F_]+)$""",
        re.X,
    ),
    list("-+0123456789"),
)
DocumentLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"""^(?:[-+]?(?:[0-9][0-9_]*)\.[0-9_]*(?:[eE][-+][0-9]+)?
        |\.[0-9][0-9_]*(?:[eE][-+][0-9]+)?
        |[-+]?\.(?:inf|Inf|INF)
        |\.(?:nan|NaN|NAN))$""",
        re.X,
    ),
    list("-+0123456789."),
)


def decode(raw: Union[bytes, str]) -> DocumentConfig:
    try:
        data: Any = yaml.load(raw, Loader=DocumentLoader)
    except yaml.YAMLError as e:
        raise DecodeError(str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DecodeError(f"expected a mapping at the top level, got {type(data).__name__}")

    try:
        return DocumentConfig.model_validate(data)
    except ValidationError as e:
        raise MalformedValueError(describe_validation_error(e)) from e


def build(document: DocumentConfig) -> Config:
    peers = tuple(validate_peer(i, entry) for i, entry in enumerate(document.peers or ()))

    communities = CommunityResolver(document.communities)

    tracker = RangeTracker()
    pools: Dict[str, Pool] = {}
    for i, entry in enumerate(document.address_pools or ()):
        pool = validate_pool(i, entry, pools.keys(), tracker, communities)
        pools[pool.name] = pool

    return Config(peers=peers, pools=MappingProxyType(pools))


def parse(raw: Union[bytes, str]) -> Config:
    """
    Parses and validates a configuration document.

    Either returns a complete Config or raises the first ConfigError found;
    nothing is built from a rejected document.
    """
    try:
        config = build(decode(raw))
    except ConfigError as e:
        logger.debug(f"Rejected configuration: {e}")
        raise

    logger.debug(f"Parsed configuration with {len(config.peers)} peers and {len(config.pools)} pools")
    return config


def load_config(path: Union[str, PathLike]) -> Config:
    with open(path, "rb") as f:
        data = f.read()
    return parse(data)
