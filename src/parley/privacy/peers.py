"""Split signed peer ids into individuals and groups."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .types import PeerId, is_group, is_valid_peer_id


@dataclass
class PeerSplit:
    """Peer ids partitioned by kind.

    Both lists hold positive ids; ``groups`` holds the absolute value of the
    original negative ids.
    """

    individuals: list[int] = field(default_factory=list)
    groups: list[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.individuals or self.groups)


def split_peers_by_type(peer_ids: Iterable[PeerId]) -> PeerSplit:
    """Partition ``peer_ids`` by sign, keeping order and duplicates.

    >>> split_peers_by_type([5, -3, 7, -3, 2])
    PeerSplit(individuals=[5, 7, 2], groups=[3, 3])
    """
    split = PeerSplit()
    for peer_id in peer_ids:
        if not is_valid_peer_id(peer_id):
            continue
        if is_group(peer_id):
            split.groups.append(-peer_id)
        else:
            split.individuals.append(peer_id)
    return split
