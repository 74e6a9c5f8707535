"""Family profiling, link scoring and cluster labeling."""

from .cluster_labels import UnionFind, resolve_cluster_labels
from .family_profiles import FamilyProfileSource, build_family_profiles, rank_families, score_family_match
from .links import compute_links, score_pair

__all__ = [
    "FamilyProfileSource",
    "UnionFind",
    "build_family_profiles",
    "compute_links",
    "rank_families",
    "resolve_cluster_labels",
    "score_family_match",
    "score_pair",
]
