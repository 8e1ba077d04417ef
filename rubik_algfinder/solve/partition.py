# rubik_algfinder/solve/partition.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rubik_algfinder.logic.turns import Algorithm, RunKey, Turn, TurnCatalog


@dataclass(frozen=True)
class WorkUnit:
    """Porción independiente del espacio de búsqueda de una profundidad.

    Attributes:
        index: Posición de la unidad; los resultados se combinan en este orden.
        prefix: Giros iniciales fijos de todos los algoritmos de la unidad.
        remaining: Giros que el worker debe agregar después del prefijo.
    """

    index: int
    prefix: Algorithm
    remaining: int

    @property
    def prefix_names(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.prefix)


def partition_frontier(
    catalog: TurnCatalog,
    allowed: Sequence[Turn],
    depth: int,
    parallelism: int,
    max_prefix_depth: int = 3,
) -> List[WorkUnit]:
    """Divide la búsqueda de una profundidad en prefijos disjuntos.

    Los prefijos se arman por niveles (BFS) en orden de catálogo hasta tener al
    menos `parallelism` prefijos, o hasta llegar a `max_prefix_depth` o a `depth`.
    Todos los prefijos tienen el mismo largo y respetan la regla de poda, así
    que cubren el espacio completo sin solaparse. El orden de los índices
    coincide con el orden del DFS serial.

    Args:
        catalog: Catálogo de giros.
        allowed: Giros permitidos (en orden de catálogo).
        depth: Largo total de los algoritmos buscados (>= 1).
        parallelism: Cantidad mínima de unidades deseada.
        max_prefix_depth: Largo máximo de prefijo.

    Returns:
        Lista de unidades; vacía si ningún prefijo sobrevive a la poda.

    Raises:
        ValueError: Si `depth` es negativo.
    """
    if depth < 0:
        raise ValueError("depth debe ser >= 0.")

    followers = catalog.followers(allowed)
    # (prefijo, racha final del prefijo)
    level: List[Tuple[Algorithm, Optional[RunKey]]] = [((), None)]
    prefix_len = 0

    while (
        len(level) < parallelism
        and prefix_len < min(depth, max_prefix_depth)
        and level
    ):
        level = [
            (prefix + (turn,), after)
            for prefix, run in level
            for turn, after in followers[run]
        ]
        prefix_len += 1

    return [
        WorkUnit(index=i, prefix=prefix, remaining=depth - prefix_len)
        for i, (prefix, _) in enumerate(level)
    ]
