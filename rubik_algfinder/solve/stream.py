# rubik_algfinder/solve/stream.py
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Tuple, Union

from rubik_algfinder.logic.turns import Algorithm

if TYPE_CHECKING:
    from rubik_algfinder.solve.coordinator import DepthCoordinator

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


class EndReason(str, Enum):
    """Motivo de fin del stream (no son errores)."""

    EXHAUSTED = "exhausted"  # se alcanzó el límite de profundidad
    CANCELLED = "cancelled"  # lo detuvo el usuario o el presupuesto de tiempo


@dataclass(frozen=True)
class DepthBatch:
    """Todos los algoritmos de una profundidad, en orden de descubrimiento."""

    depth: int
    algorithms: Tuple[Algorithm, ...]


@dataclass(frozen=True)
class EndOfStream:
    """Marca de fin del stream.

    Attributes:
        reason: EXHAUSTED o CANCELLED.
        depth: Última profundidad entregada completa (-1 si ninguna).
    """

    reason: EndReason
    depth: int


@dataclass(frozen=True)
class _Failure:
    error: BaseException


StreamItem = Union[DepthBatch, EndOfStream, _Failure]


class ResultStream:
    """Secuencia perezosa de algoritmos, ordenada por profundidad.

    El coordinador corre en un hilo de fondo y entrega un lote por profundidad
    completa a través de una cola acotada: puede adelantarse hasta
    `max_pending_batches` lotes, después espera a que el consumidor lea.

    Uso:
        with find_algorithms(start, goal, moves) as stream:
            for alg in stream:
                ...
        print(stream.end.reason)

    Dejar de consumir (cerrar el iterador o salir del `with`) equivale a cancelar.
    """

    def __init__(self, coordinator: DepthCoordinator, max_pending_batches: int = 2) -> None:
        self._coordinator = coordinator
        self._queue: "queue.Queue[StreamItem]" = queue.Queue(maxsize=max_pending_batches)
        self._thread = threading.Thread(
            target=self._run, name="rubik-algfinder-coordinator", daemon=True
        )
        self._final: Optional[StreamItem] = None
        self.end: Optional[EndOfStream] = None

    # --------------------------
    # Lifecycle
    # --------------------------
    def start(self) -> ResultStream:
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Pide la cancelación de la búsqueda (no bloquea)."""
        self._coordinator.cancel()

    @property
    def cancelled(self) -> bool:
        return self._coordinator.cancelled

    def join(self, timeout: Optional[float] = None) -> None:
        """Espera a que termine el hilo del coordinador."""
        if self._thread.is_alive():
            self._thread.join(timeout)

    def close(self) -> None:
        """Cancela y espera a que se liberen los workers."""
        self.cancel()
        self.join()

    def __enter__(self) -> ResultStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --------------------------
    # Consumo
    # --------------------------
    def __iter__(self) -> Iterator[Algorithm]:
        batches = self.batches()
        try:
            for batch in batches:
                yield from batch.algorithms
        finally:
            batches.close()

    def batches(self) -> Iterator[DepthBatch]:
        """Itera los lotes por profundidad (incluye lotes vacíos).

        Raises:
            Exception: El error que haya hecho fallar la búsqueda.
        """
        try:
            while True:
                item = self._next_item()
                if isinstance(item, DepthBatch):
                    yield item
                elif isinstance(item, EndOfStream):
                    self.end = item
                    return
                else:
                    raise item.error
        finally:
            if self.end is None:
                # El consumidor dejó de leer: cancelación implícita
                self.cancel()

    def _next_item(self) -> StreamItem:
        while True:
            try:
                return self._queue.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                if not self._thread.is_alive() and self._queue.empty():
                    if self._final is None:
                        raise RuntimeError("El coordinador terminó sin marca de fin")
                    return self._final

    # --------------------------
    # Lado del coordinador
    # --------------------------
    def _publish(self, batch: DepthBatch) -> bool:
        """Encola un lote; espera si la cola está llena. False si se canceló."""
        while not self._coordinator.cancelled:
            try:
                self._queue.put(batch, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _finish(self, item: StreamItem) -> None:
        self._final = item
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            # El consumidor lo toma de `_final` cuando vacíe la cola
            pass

    def _run(self) -> None:
        try:
            end = self._coordinator.run(self._publish)
        except Exception as exc:
            logger.exception("La búsqueda falló")
            self._finish(_Failure(exc))
        else:
            logger.info("Búsqueda terminada: %s (profundidad %d)", end.reason.value, end.depth)
            self._finish(end)
