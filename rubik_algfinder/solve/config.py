# rubik_algfinder/solve/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional

ExecutorKind = Literal["process", "thread"]


@dataclass(frozen=True)
class SearchConfig:
    """Parámetros de una búsqueda.

    Attributes:
        max_depth: Profundidad máxima a explorar (None = sin límite, hasta cancelar).
        time_budget: Segundos de reloj antes de cancelar automáticamente (None = sin límite).
        workers: Tamaño del pool de workers (None = cantidad de núcleos).
        executor: "process" (varios núcleos) o "thread".
        units_per_worker: Unidades de trabajo por worker que intenta generar el particionador.
        max_prefix_depth: Largo máximo de los prefijos que arma el particionador.
        max_pending_batches: Lotes que el coordinador puede adelantar sin que el consumidor los lea.
    """

    max_depth: Optional[int] = None
    time_budget: Optional[float] = None
    workers: Optional[int] = None
    executor: ExecutorKind = "process"
    units_per_worker: int = 4
    max_prefix_depth: int = 3
    max_pending_batches: int = 2

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("max_depth debe ser >= 0.")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError("time_budget debe ser mayor que 0.")
        if self.workers is not None and self.workers <= 0:
            raise ValueError("workers debe ser mayor que 0.")
        if self.executor not in ("process", "thread"):
            raise ValueError(f"Executor no soportado: {self.executor}")
        if self.units_per_worker <= 0:
            raise ValueError("units_per_worker debe ser mayor que 0.")
        if self.max_prefix_depth < 0:
            raise ValueError("max_prefix_depth debe ser >= 0.")
        if self.max_pending_batches <= 0:
            raise ValueError("max_pending_batches debe ser mayor que 0.")

    @property
    def pool_size(self) -> int:
        return self.workers or os.cpu_count() or 1

    @property
    def parallelism(self) -> int:
        """Cantidad objetivo de unidades de trabajo por profundidad."""
        return self.pool_size * self.units_per_worker
