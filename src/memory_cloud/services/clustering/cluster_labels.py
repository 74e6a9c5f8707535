"""Connected-component labeling of the link graph."""

from collections.abc import Hashable, Iterable, Sequence
from uuid import UUID

from memory_cloud.core.constants import UNLABELED_MOOD
from memory_cloud.domain.models import Link, Memory


class UnionFind:
    """Disjoint sets over a fixed universe of ids, with path compression."""

    def __init__(self, ids: Iterable[Hashable]):
        self.parent: dict[Hashable, Hashable] = {node: node for node in ids}

    def __contains__(self, node: Hashable) -> bool:
        return node in self.parent

    def find(self, node: Hashable) -> Hashable:
        if node not in self.parent:
            return node
        root = node
        while self.parent[root] != root:
            root = self.parent[root]
        while node != root:
            self.parent[node], node = root, self.parent[node]
        return root

    def union(self, a: Hashable, b: Hashable) -> None:
        """Merge the sets of `a` and `b`; the root of `a` survives."""
        if a not in self.parent or b not in self.parent:
            return
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a != root_b:
            self.parent[root_b] = root_a


def normalize_mood(mood: str | None) -> str:
    cleaned = mood.strip() if isinstance(mood, str) else ""
    return cleaned or UNLABELED_MOOD


def resolve_cluster_labels(memories: Sequence[Memory], links: Iterable[Link]) -> dict[UUID, str]:
    """Label every memory with the majority mood of its connected component.

    Links pointing at memories outside ``memories`` are ignored. Mood ties go
    to the mood encountered first in ``memories`` order.
    """
    groups = UnionFind(memory.id for memory in memories)
    for link in links:
        groups.union(link.from_id, link.to_id)

    # dicts keep insertion order, so max() below resolves ties to first seen
    tallies: dict[Hashable, dict[str, int]] = {}
    for memory in memories:
        counts = tallies.setdefault(groups.find(memory.id), {})
        mood = normalize_mood(memory.mood)
        counts[mood] = counts.get(mood, 0) + 1

    labels: dict[UUID, str] = {}
    for memory in memories:
        counts = tallies[groups.find(memory.id)]
        labels[memory.id] = max(counts, key=counts.__getitem__)
    return labels
