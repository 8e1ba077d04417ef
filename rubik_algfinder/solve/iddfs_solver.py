# rubik_algfinder/solve/iddfs_solver.py
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Union

from rubik_algfinder.core.facelets import FaceletState
from rubik_algfinder.logic.turns import TurnCatalog, TurnLike, get_catalog
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.coordinator import DepthCoordinator, OnDepthCallback
from rubik_algfinder.solve.stream import ResultStream

ShouldCancelCallback = Callable[[], bool]
StateInput = Union[FaceletState, str]

# Segundos entre consultas a `should_cancel` durante una profundidad
CANCEL_POLL_INTERVAL = 0.05


def _as_state(value: StateInput) -> FaceletState:
    if isinstance(value, FaceletState):
        return value
    return FaceletState.from_string(value)


def find_algorithms(
    start: StateInput,
    goal: StateInput,
    allowed: Optional[Iterable[TurnLike]] = None,
    config: Optional[SearchConfig] = None,
    catalog: Optional[TurnCatalog] = None,
    on_depth: Optional[OnDepthCallback] = None,
) -> ResultStream:
    """Enumera todos los algoritmos que llevan `start` a `goal`, de menor a mayor largo.

    La validación es sincrónica: los errores de entrada se lanzan aquí, antes
    de crear cualquier worker. La búsqueda corre en segundo plano y los
    resultados se consumen del stream retornado.

    Args:
        start: Estado de partida (o su texto de 54 facelets).
        goal: Patrón objetivo, con comodines (o su texto).
        allowed: Giros permitidos; por defecto todo el catálogo.
        config: Parámetros de la búsqueda (profundidad máxima, tiempo, workers...).
        catalog: Catálogo de giros (por defecto las 18 caras).
        on_depth: Callback opcional con la profundidad que se empieza a explorar.

    Returns:
        Un `ResultStream` ya iniciado.

    Raises:
        ShapeMismatch: Si algún estado no tiene 54 facelets.
        EmptyMoveSet: Si no hay giros permitidos.
        UnknownTurn: Si algún giro no está en el catálogo.
    """
    config = config or SearchConfig()
    catalog = catalog or get_catalog()
    coordinator = DepthCoordinator(
        _as_state(start),
        _as_state(goal),
        catalog.turns if allowed is None else allowed,
        config=config,
        catalog=catalog,
        on_depth=on_depth,
    )
    return ResultStream(coordinator, config.max_pending_batches).start()


def iddfs_solve(
    start: StateInput,
    goal: Optional[StateInput] = None,
    allowed: Optional[Iterable[TurnLike]] = None,
    max_depth: int = 6,
    on_depth: Optional[OnDepthCallback] = None,
    should_cancel: Optional[ShouldCancelCallback] = None,
    config: Optional[SearchConfig] = None,
) -> Optional[List[str]]:
    """Busca el algoritmo más corto usando IDDFS (búsqueda en profundidad iterativa).

    Args:
        start: Cubo a resolver.
        goal: Patrón objetivo; por defecto el cubo resuelto.
        allowed: Giros permitidos; por defecto las 18 caras.
        max_depth: Profundidad máxima que se probará en la búsqueda.
        on_depth: Callback opcional que se llama con la profundidad actual probada.
        should_cancel: Callback opcional para cancelar la búsqueda (retorna True si se cancela).
            Se consulta al empezar cada profundidad y, mientras la búsqueda corre,
            cada `CANCEL_POLL_INTERVAL` segundos.
        config: Parámetros adicionales (se ignora su `max_depth`).

    Returns:
        Una lista de movimientos (notación estándar, ej: ["R", "U", "R'", "U'"])
        si se encuentra solución dentro de `max_depth`. Si no se encuentra o se
        cancela, retorna None. Si el cubo ya cumple el objetivo, retorna una lista vacía.
    """
    config = replace(config or SearchConfig(), max_depth=max_depth)
    catalog = get_catalog()
    coordinator: DepthCoordinator

    def _on_depth(depth: int) -> None:
        if should_cancel is not None and should_cancel():
            coordinator.cancel()
            return
        if on_depth is not None:
            on_depth(depth)

    coordinator = DepthCoordinator(
        _as_state(start),
        _as_state(goal) if goal is not None else FaceletState.solved(),
        catalog.turns if allowed is None else allowed,
        config=config,
        catalog=catalog,
        on_depth=_on_depth,
    )

    done = threading.Event()
    poller: Optional[threading.Thread] = None
    if should_cancel is not None:
        poller = threading.Thread(
            target=_poll_cancel,
            args=(should_cancel, coordinator, done),
            name="rubik-algfinder-cancel-poll",
            daemon=True,
        )
        poller.start()

    try:
        with ResultStream(coordinator, config.max_pending_batches).start() as stream:
            for alg in stream:
                return [t.name for t in alg]
        return None
    finally:
        done.set()
        if poller is not None:
            poller.join()


def _poll_cancel(
    should_cancel: ShouldCancelCallback,
    coordinator: DepthCoordinator,
    done: threading.Event,
) -> None:
    while not done.wait(CANCEL_POLL_INTERVAL):
        if should_cancel():
            coordinator.cancel()
            return
