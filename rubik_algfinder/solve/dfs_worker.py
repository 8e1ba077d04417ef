# rubik_algfinder/solve/dfs_worker.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from rubik_algfinder.core.facelets import FaceletState, Facelets, Matcher, compile_matcher
from rubik_algfinder.errors import ShapeMismatch
from rubik_algfinder.logic.turns import (
    Algorithm,
    FollowerTable,
    RunKey,
    Turn,
    TurnCatalog,
    get_catalog,
)

ShouldCancelCallback = Callable[[], bool]
StateLike = Union[FaceletState, Sequence[str]]

# Evento de cancelación del proceso worker (lo instala `init_worker`)
_CANCEL_EVENT: Optional[Any] = None


class PrefixSearch:
    """DFS de profundidad fija a partir de un prefijo.

    Produce, de forma perezosa, cada algoritmo de largo exacto
    `len(prefix) + remaining_depth` que empieza con `prefix`, continúa solo con
    giros permitidos (respetando la poda) y deja el cubo en un estado que cumple
    `goal`. La comparación con el objetivo solo se hace al llegar a la
    profundidad exacta: las profundidades menores ya las exploró el coordinador.

    El orden es pre-orden del DFS sobre los giros permitidos en orden de
    catálogo, por lo que es reproducible. Cada iteración reinicia la búsqueda.

    Attributes:
        leaves: Nodos hoja visitados en la última iteración.
        cancelled: True si la última iteración se detuvo por cancelación.
    """

    def __init__(
        self,
        start: StateLike,
        goal: StateLike,
        prefix: Sequence[Turn],
        remaining_depth: int,
        allowed: Sequence[Turn],
        catalog: TurnCatalog,
        should_cancel: Optional[ShouldCancelCallback] = None,
        *,
        matcher: Optional[Matcher] = None,
        followers: Optional[FollowerTable] = None,
    ) -> None:
        """Prepara la búsqueda.

        Args:
            start: Estado de partida (antes del prefijo).
            goal: Patrón objetivo (con comodines).
            prefix: Giros fijos iniciales.
            remaining_depth: Giros a agregar después del prefijo.
            allowed: Giros permitidos para la continuación, en orden de catálogo.
            catalog: Catálogo de giros (para la regla de poda).
            should_cancel: Callback opcional; se consulta en nodos internos.
            matcher: Predicado del objetivo ya compilado (opcional).
            followers: Tabla de sucesores ya calculada (opcional).

        Raises:
            ValueError: Si `remaining_depth` es negativo.
            ShapeMismatch: Si start y goal tienen distinto largo.
        """
        if remaining_depth < 0:
            raise ValueError("remaining_depth debe ser >= 0.")

        self._start: Facelets = tuple(start)
        goal_facelets = tuple(goal)
        if len(self._start) != len(goal_facelets):
            raise ShapeMismatch(
                f"Estados de distinto largo: {len(self._start)} y {len(goal_facelets)}"
            )

        self.prefix: Algorithm = tuple(prefix)
        self.remaining_depth = remaining_depth
        self._matcher = matcher or compile_matcher(goal_facelets)
        self._followers = followers or catalog.followers(allowed)
        self._should_cancel = should_cancel

        run = catalog.run_of(self.prefix)
        if run in self._followers:
            self._first_choices = self._followers[run]
        else:
            # Prefijo que termina en una base sin giros permitidos: se aplica la misma poda
            allowed_set = frozenset(allowed)
            self._first_choices = tuple(
                (t, catalog.run_after(run, t))
                for t in allowed
                if catalog.can_follow(run, t, allowed_set)
            )

        self.leaves = 0
        self.cancelled = False

    def __iter__(self) -> Iterator[Algorithm]:
        self.leaves = 0
        self.cancelled = False

        facelets = self._start
        for turn in self.prefix:
            facelets = turn.permute(facelets)

        path: List[Turn] = list(self.prefix)
        return self._dfs(facelets, self._first_choices, self.remaining_depth, path)

    def _dfs(
        self,
        facelets: Facelets,
        choices: Tuple[Tuple[Turn, RunKey], ...],
        remaining: int,
        path: List[Turn],
    ) -> Iterator[Algorithm]:
        """DFS limitado en profundidad.

        Args:
            facelets: Estado actual (tupla cruda).
            choices: Pares (giro, racha resultante) aplicables en este nodo (ya podados).
            remaining: Profundidad restante.
            path: Ruta acumulada (se modifica y se restaura al volver).
        """
        if remaining == 0:
            self.leaves += 1
            if self._matcher(facelets):
                yield tuple(path)
            return

        # Checkpoint de cancelación: solo en nodos internos
        if remaining > 1 and self._should_cancel is not None and self._should_cancel():
            self.cancelled = True
            return

        if remaining == 1:
            for turn, _ in choices:
                self.leaves += 1
                if self._matcher(turn.permute(facelets)):
                    path.append(turn)
                    yield tuple(path)
                    path.pop()
            return

        for turn, run in choices:
            if self.cancelled:
                return
            path.append(turn)
            yield from self._dfs(
                turn.permute(facelets), self._followers[run], remaining - 1, path
            )
            # Backtrack
            path.pop()


def search(
    start: StateLike,
    goal: StateLike,
    prefix: Sequence[Turn],
    remaining_depth: int,
    allowed: Sequence[Turn],
    catalog: Optional[TurnCatalog] = None,
    should_cancel: Optional[ShouldCancelCallback] = None,
) -> PrefixSearch:
    """Busca todos los algoritmos que extienden `prefix` en `remaining_depth` giros.

    Es un DFS de profundidad fija (no iterativo): la profundización la maneja el
    coordinador invocándolo de nuevo con profundidades crecientes.

    Returns:
        Un iterable perezoso de algoritmos (tuplas de `Turn`).
    """
    if catalog is None:
        catalog = get_catalog()
    return PrefixSearch(
        start, goal, prefix, remaining_depth, allowed, catalog, should_cancel
    )


# --------------------------
# Ejecución en pool (hilos o procesos)
# --------------------------
@dataclass(frozen=True)
class SearchProblem:
    """Datos de una búsqueda, serializables para enviarlos a otro proceso."""

    start: Facelets
    goal: Facelets
    allowed: Tuple[str, ...]
    bases: Tuple[str, ...]


@dataclass(frozen=True)
class WorkResult:
    """Resultado de una unidad de trabajo.

    Attributes:
        index: Índice de la unidad (orden de combinación).
        algorithms: Algoritmos encontrados, como tuplas de nombres.
        leaves: Hojas visitadas (0 indica que no quedan secuencias de ese largo).
        completed: False si la unidad se detuvo por cancelación.
    """

    index: int
    algorithms: Tuple[Tuple[str, ...], ...]
    leaves: int
    completed: bool


@lru_cache(maxsize=8)
def _prepare(problem: SearchProblem) -> Tuple[TurnCatalog, Tuple[Turn, ...], Matcher, FollowerTable]:
    catalog = get_catalog(problem.bases)
    allowed = catalog.resolve(problem.allowed)
    return catalog, allowed, compile_matcher(problem.goal), catalog.followers(allowed)


def init_worker(cancel_event: Any) -> None:
    """Inicializador del pool de procesos: instala el evento de cancelación compartido."""
    global _CANCEL_EVENT
    _CANCEL_EVENT = cancel_event


def run_work_unit(
    problem: SearchProblem,
    index: int,
    prefix_names: Tuple[str, ...],
    remaining: int,
    cancel_event: Optional[Any] = None,
) -> WorkResult:
    """Ejecuta una unidad de trabajo completa y acumula sus resultados localmente.

    Args:
        problem: Datos de la búsqueda.
        index: Índice de la unidad.
        prefix_names: Nombres de los giros del prefijo.
        remaining: Giros a agregar después del prefijo.
        cancel_event: Evento de cancelación (en un pool de procesos se usa el
            instalado por `init_worker`).

    Returns:
        Un `WorkResult` con los algoritmos en el orden del DFS.

    Raises:
        UnknownTurn: Si el prefijo o los giros permitidos no están en el catálogo.
    """
    event = cancel_event if cancel_event is not None else _CANCEL_EVENT
    catalog, allowed, matcher, followers = _prepare(problem)

    walk = PrefixSearch(
        problem.start,
        problem.goal,
        tuple(catalog.get(name) for name in prefix_names),
        remaining,
        allowed,
        catalog,
        should_cancel=event.is_set if event is not None else None,
        matcher=matcher,
        followers=followers,
    )
    algorithms = tuple(tuple(t.name for t in alg) for alg in walk)
    return WorkResult(index, algorithms, walk.leaves, not walk.cancelled)
