# rubik_algfinder/tests/support.py
from __future__ import annotations

import itertools
from typing import List, Sequence

from rubik_algfinder.core.facelets import FaceletState, compile_matcher
from rubik_algfinder.logic.turns import Algorithm, Turn, TurnCatalog


def brute_force(
    catalog: TurnCatalog,
    start: FaceletState,
    goal: FaceletState,
    allowed: Sequence[Turn],
    depth: int,
) -> List[Algorithm]:
    """Enumera a fuerza bruta (product) las secuencias de largo `depth` que cumplen `goal`."""
    allowed_set = frozenset(allowed)
    matcher = compile_matcher(goal.facelets)
    out: List[Algorithm] = []
    for seq in itertools.product(allowed, repeat=depth):
        if not catalog.accepts(seq, allowed_set):
            continue
        if matcher(start.apply_sequence(seq).facelets):
            out.append(seq)
    return out


def names(algorithms) -> List[str]:
    return [" ".join(t.name for t in alg) for alg in algorithms]
