# rubik_algfinder/app/search_worker.py
from __future__ import annotations

import traceback
from typing import Iterable, List, Optional

from PySide6.QtCore import QThread, Signal

from rubik_algfinder.core.facelets import FaceletState
from rubik_algfinder.logic.moves import format_algorithm
from rubik_algfinder.logic.turns import TurnCatalog, TurnLike
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.iddfs_solver import find_algorithms
from rubik_algfinder.solve.stream import EndReason, ResultStream


class SearchWorker(QThread):
    """Hilo de trabajo para enumerar algoritmos sin bloquear la UI.

    Consume el `ResultStream` de la búsqueda paralela y reenvía cada lote por
    señales, listo para mostrar en la lista de resultados.

    Signals:
        depth_update(int): Se emite cuando el coordinador empieza una nueva profundidad.
        batch_found(int, object): Profundidad terminada y sus algoritmos (list[str]).
        finished_search(str): Motivo de fin ("exhausted" o "cancelled").
        error(str): Se emite si ocurre una excepción durante la búsqueda.
    """

    depth_update = Signal(int)          # profundidad en curso
    batch_found = Signal(int, object)   # profundidad, list[str]
    finished_search = Signal(str)       # EndReason.value
    error = Signal(str)                 # traceback si algo falla

    def __init__(
        self,
        start: FaceletState,
        goal: FaceletState,
        allowed: Iterable[TurnLike],
        config: Optional[SearchConfig] = None,
        catalog: Optional[TurnCatalog] = None,
    ) -> None:
        """Crea el worker.

        Los estados son valores inmutables, así que la UI puede seguir editando
        sus cubos sin afectar la búsqueda en curso.

        Args:
            start: Estado de partida.
            goal: Patrón objetivo.
            allowed: Giros permitidos (según los toggles de la UI).
            config: Parámetros de la búsqueda.
            catalog: Catálogo de giros.
        """
        super().__init__()
        self.start_state: FaceletState = start
        self.goal_state: FaceletState = goal
        self.allowed: List[TurnLike] = list(allowed)
        self.config: Optional[SearchConfig] = config
        self.catalog: Optional[TurnCatalog] = catalog
        self._stream: Optional[ResultStream] = None
        self._cancel_requested = False

    def cancel(self) -> None:
        """Pide detener la búsqueda; los lotes ya completos se siguen entregando."""
        self._cancel_requested = True
        self.requestInterruption()
        if self._stream is not None:
            self._stream.cancel()

    def run(self) -> None:
        """Punto de entrada del hilo.

        Lanza la búsqueda y emite los resultados por señales.
        """
        if self._cancel_requested:
            self.finished_search.emit(EndReason.CANCELLED.value)
            return

        try:
            stream = find_algorithms(
                self.start_state,
                self.goal_state,
                self.allowed,
                config=self.config,
                catalog=self.catalog,
                on_depth=self.depth_update.emit,
            )
            self._stream = stream
            if self._cancel_requested or self.isInterruptionRequested():
                stream.cancel()

            with stream:
                for batch in stream.batches():
                    self.batch_found.emit(
                        batch.depth, [format_algorithm(alg) for alg in batch.algorithms]
                    )
            if stream.end is not None:
                self.finished_search.emit(stream.end.reason.value)
        except Exception:
            msg = traceback.format_exc()
            self.error.emit(msg)
