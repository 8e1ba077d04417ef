# rubik_algfinder/__init__.py
from rubik_algfinder.core.facelets import (
    WILDCARD,
    FaceletState,
    count_missing,
    matches,
)
from rubik_algfinder.errors import (
    AlgFinderError,
    EmptyMoveSet,
    ShapeMismatch,
    UnknownTurn,
)
from rubik_algfinder.logic.turns import Turn, TurnCatalog, catalog_from_preset, get_catalog
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.iddfs_solver import find_algorithms, iddfs_solve
from rubik_algfinder.solve.stream import DepthBatch, EndOfStream, EndReason, ResultStream

__all__ = [
    "WILDCARD",
    "AlgFinderError",
    "DepthBatch",
    "EmptyMoveSet",
    "EndOfStream",
    "EndReason",
    "FaceletState",
    "ResultStream",
    "SearchConfig",
    "ShapeMismatch",
    "Turn",
    "TurnCatalog",
    "UnknownTurn",
    "catalog_from_preset",
    "count_missing",
    "find_algorithms",
    "get_catalog",
    "iddfs_solve",
    "matches",
]
