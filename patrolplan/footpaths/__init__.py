"""Footpath graph layer: snapshot contracts, graph building, pruning and search helpers."""

from .grid import RideMarker, TileInfo, TileQuery
from .graph import GraphBuild, Node, PathGraph, build_path_graph
from .schemas import ParkMapState, RideState, TileState
from .pruning import PruneResult, protected_tiles, prune_dead_ends
from .helpers import (
    bfs_tree,
    centroid,
    degree_within,
    manhattan,
    plaza_tiles,
    reachable_from,
    reconstruct_path,
    round_half_up,
)

__all__ = [
    "RideMarker",
    "TileInfo",
    "TileQuery",
    "GraphBuild",
    "Node",
    "PathGraph",
    "build_path_graph",
    "ParkMapState",
    "RideState",
    "TileState",
    "PruneResult",
    "protected_tiles",
    "prune_dead_ends",
    "bfs_tree",
    "centroid",
    "degree_within",
    "manhattan",
    "plaza_tiles",
    "reachable_from",
    "reconstruct_path",
    "round_half_up",
]
