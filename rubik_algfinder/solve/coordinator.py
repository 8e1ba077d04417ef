# rubik_algfinder/solve/coordinator.py
from __future__ import annotations

import logging
import multiprocessing
import threading
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from functools import partial
from typing import Any, Callable, Iterable, List, Optional, Tuple

from rubik_algfinder.core.facelets import FaceletState
from rubik_algfinder.errors import ShapeMismatch
from rubik_algfinder.logic.turns import Algorithm, Turn, TurnCatalog, TurnLike, get_catalog
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.dfs_worker import (
    SearchProblem,
    WorkResult,
    init_worker,
    run_work_unit,
)
from rubik_algfinder.solve.partition import partition_frontier
from rubik_algfinder.solve.stream import DepthBatch, EndOfStream, EndReason

logger = logging.getLogger(__name__)

OnDepthCallback = Callable[[int], None]
PublishCallback = Callable[[DepthBatch], bool]


class DepthCoordinator:
    """Coordina la profundización iterativa en paralelo.

    Máquina de estados:
        - Init: valida las entradas (se hace en el constructor, antes de crear workers).
        - Depth=0: compara start con goal sin lanzar workers.
        - Depth=d: particiona, reparte las unidades al pool, espera a todas,
          combina por índice de partición y publica el lote.
        - Cancelled: cancelación explícita, consumidor que abandona o presupuesto
          de tiempo agotado. El lote de la profundidad en curso se descarta.
        - Exhausted: se alcanzó `max_depth`, o una profundidad no visitó ninguna
          hoja (la poda no deja secuencias de ese largo ni, por lo tanto, más largas).

    El pool se crea una sola vez por búsqueda y se reutiliza entre profundidades.
    """

    def __init__(
        self,
        start: FaceletState,
        goal: FaceletState,
        allowed: Iterable[TurnLike],
        config: Optional[SearchConfig] = None,
        catalog: Optional[TurnCatalog] = None,
        on_depth: Optional[OnDepthCallback] = None,
    ) -> None:
        """Valida las entradas de la búsqueda.

        Args:
            start: Estado de partida.
            goal: Patrón objetivo.
            allowed: Giros permitidos (nombres o `Turn`).
            config: Parámetros de la búsqueda.
            catalog: Catálogo de giros (por defecto las 18 caras).
            on_depth: Callback opcional, llamado al empezar cada profundidad >= 1.

        Raises:
            ShapeMismatch: Si start y goal tienen distinto largo.
            EmptyMoveSet: Si no hay giros permitidos.
            UnknownTurn: Si algún giro no está en el catálogo.
        """
        if len(start) != len(goal):
            raise ShapeMismatch(f"Estados de distinto largo: {len(start)} y {len(goal)}")

        self.start = start
        self.goal = goal
        self.config = config or SearchConfig()
        self.catalog = catalog or get_catalog()
        self.allowed: Tuple[Turn, ...] = self.catalog.resolve(allowed)
        self.on_depth = on_depth

        self.problem = SearchProblem(
            start=start.facelets,
            goal=goal.facelets,
            allowed=tuple(t.name for t in self.allowed),
            bases=self.catalog.bases,
        )

        self.workers_spawned = False
        self._executor: Optional[Executor] = None
        self._cancel_event: Any = self._make_event()
        self._cancelled = threading.Event()

    # --------------------------
    # Cancelación
    # --------------------------
    def _make_event(self) -> Any:
        if self.config.executor == "process":
            return multiprocessing.get_context().Event()
        return threading.Event()

    def cancel(self) -> None:
        """Pide a los workers que se detengan en su próximo checkpoint."""
        if not self._cancelled.is_set():
            logger.debug("Cancelación solicitada")
        self._cancelled.set()
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    # --------------------------
    # Ejecución
    # --------------------------
    def run(self, publish: PublishCallback) -> EndOfStream:
        """Ejecuta la búsqueda completa, publicando un lote por profundidad.

        Args:
            publish: Recibe cada lote; retorna False si el stream se canceló.

        Returns:
            La marca de fin (EXHAUSTED o CANCELLED).

        Raises:
            UnknownTurn: Si un worker encuentra un giro fuera del catálogo (fatal).
        """
        timer: Optional[threading.Timer] = None
        if self.config.time_budget is not None:
            timer = threading.Timer(self.config.time_budget, self.cancel)
            timer.daemon = True
            timer.start()

        logger.info(
            "Buscando con %d giros permitidos (max_depth=%s, executor=%s)",
            len(self.allowed),
            self.config.max_depth,
            self.config.executor,
        )
        try:
            return self._iterate(publish)
        except Exception:
            # Error fatal: se detienen todas las unidades en curso
            self.cancel()
            raise
        finally:
            if timer is not None:
                timer.cancel()
            self._shutdown()

    def _iterate(self, publish: PublishCallback) -> EndOfStream:
        max_depth = self.config.max_depth
        last_depth = -1

        # Profundidad 0: sin workers
        found: Tuple[Algorithm, ...] = ((),) if self.start.matches(self.goal) else ()
        if not publish(DepthBatch(0, found)):
            return EndOfStream(EndReason.CANCELLED, last_depth)
        last_depth = 0

        depth = 1
        while max_depth is None or depth <= max_depth:
            if self.cancelled:
                return EndOfStream(EndReason.CANCELLED, last_depth)

            if self.on_depth is not None:
                self.on_depth(depth)
                if self.cancelled:
                    return EndOfStream(EndReason.CANCELLED, last_depth)

            batch, leaves = self._search_depth(depth)
            if batch is None:
                return EndOfStream(EndReason.CANCELLED, last_depth)

            logger.debug(
                "Profundidad %d: %d algoritmos, %d hojas", depth, len(batch.algorithms), leaves
            )
            if not publish(batch):
                return EndOfStream(EndReason.CANCELLED, last_depth)
            last_depth = depth

            if leaves == 0:
                break
            depth += 1

        return EndOfStream(EndReason.EXHAUSTED, last_depth)

    def _search_depth(self, depth: int) -> Tuple[Optional[DepthBatch], int]:
        """Busca todos los algoritmos de largo `depth`.

        Returns:
            (lote, hojas visitadas). El lote es None si la profundidad se canceló.
        """
        units = partition_frontier(
            self.catalog,
            self.allowed,
            depth,
            self.config.parallelism,
            self.config.max_prefix_depth,
        )
        if not units:
            return DepthBatch(depth, ()), 0

        executor = self._get_executor()
        task = self._task()
        futures: List["Future[WorkResult]"] = [
            executor.submit(task, self.problem, u.index, u.prefix_names, u.remaining)
            for u in units
        ]

        # Barrera: todas las unidades de esta profundidad
        wait(futures)
        results = [f.result() for f in futures]

        if self.cancelled or not all(r.completed for r in results):
            return None, 0

        algorithms: List[Algorithm] = []
        for r in sorted(results, key=lambda r: r.index):
            for names in r.algorithms:
                algorithms.append(tuple(self.catalog.get(n) for n in names))

        return DepthBatch(depth, tuple(algorithms)), sum(r.leaves for r in results)

    def _task(self) -> Callable[..., WorkResult]:
        if self.config.executor == "process":
            # El evento lo instala el inicializador del pool
            return run_work_unit
        return partial(run_work_unit, cancel_event=self._cancel_event)

    def _get_executor(self) -> Executor:
        if self._executor is None:
            size = self.config.pool_size
            logger.debug("Creando pool de %d workers (%s)", size, self.config.executor)
            if self.config.executor == "process":
                self._executor = ProcessPoolExecutor(
                    max_workers=size,
                    mp_context=multiprocessing.get_context(),
                    initializer=init_worker,
                    initargs=(self._cancel_event,),
                )
            else:
                self._executor = ThreadPoolExecutor(
                    max_workers=size, thread_name_prefix="rubik-algfinder-worker"
                )
            self.workers_spawned = True
        return self._executor

    def _shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
