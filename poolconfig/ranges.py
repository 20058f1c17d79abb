from typing import List, Optional, Tuple

from poolconfig.errors import ConsistencyError
from poolconfig.models import Network


class RangeTracker:
    """
    Accumulates the CIDR blocks accepted so far during one parse and rejects
    any block that duplicates or overlaps one of them.
    """

    def __init__(self):
        self.admitted: List[Tuple[Network, str]] = []

    def __len__(self) -> int:
        return len(self.admitted)

    def find_overlap(self, network: Network) -> Optional[Tuple[Network, str]]:
        for existing, pool_name in self.admitted:
            if existing.version == network.version and existing.overlaps(network):
                return existing, pool_name
        return None

    def admit(self, network: Network, pool_name: str) -> None:
        clash = self.find_overlap(network)
        if clash is not None:
            existing, owner = clash
            if existing == network:
                raise ConsistencyError(
                    f'CIDR {network} in pool "{pool_name}" is a duplicate of CIDR {existing} in pool "{owner}"'
                )
            raise ConsistencyError(
                f'CIDR {network} in pool "{pool_name}" overlaps with CIDR {existing} in pool "{owner}"'
            )
        self.admitted.append((network, pool_name))
