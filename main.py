# main.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from rubik_algfinder.core.facelets import FaceletState, count_missing
from rubik_algfinder.errors import AlgFinderError
from rubik_algfinder.logic.moves import format_algorithm, parse_sequence
from rubik_algfinder.logic.turns import CATALOG_PRESETS, catalog_from_preset
from rubik_algfinder.solve.config import SearchConfig
from rubik_algfinder.solve.iddfs_solver import find_algorithms

logger = logging.getLogger("rubik_algfinder")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rubik-algfinder",
        description="Enumera algoritmos que llevan un estado del cubo a un patrón objetivo.",
    )
    src = p.add_mutually_exclusive_group()
    src.add_argument("--start", help="Estado de partida: 54 facelets (U D L R F B), '_' = comodín.")
    src.add_argument("--scramble", help="Secuencia aplicada al cubo resuelto para obtener el estado de partida.")
    p.add_argument("--goal", help="Patrón objetivo (por defecto el cubo resuelto).")
    p.add_argument("--moves", help="Giros permitidos, ej: \"R R' R2 U U' U2\" (por defecto todo el catálogo).")
    p.add_argument("--catalog", choices=sorted(CATALOG_PRESETS), default="faces")
    p.add_argument("--max-depth", type=int, default=None)
    p.add_argument("--time-budget", type=float, default=None, help="Segundos antes de cancelar.")
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--executor", choices=["process", "thread"], default="process")
    p.add_argument("--limit", type=int, default=None, help="Detener después de N algoritmos.")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Punto de entrada de la línea de comandos.

    Returns:
        Código de salida: 0 si la búsqueda terminó, 2 si la entrada es inválida,
        130 si se interrumpió con Ctrl+C.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        catalog = catalog_from_preset(args.catalog)
        if args.scramble:
            start = catalog.apply_sequence(FaceletState.solved(), parse_sequence(args.scramble))
        elif args.start:
            start = FaceletState.from_string(args.start)
        else:
            start = FaceletState.solved()
        goal = FaceletState.from_string(args.goal) if args.goal else FaceletState.solved()
        moves: List[str] = parse_sequence(args.moves) if args.moves else [t.name for t in catalog]

        missing = count_missing(start, goal)
        if missing:
            detail = ", ".join(f"{c}: {n}" for c, n in missing.items())
            print(f"Advertencia: faltan colores en el estado de partida ({detail})", file=sys.stderr)

        config = SearchConfig(
            max_depth=args.max_depth,
            time_budget=args.time_budget,
            workers=args.workers,
            executor=args.executor,
        )
        stream = find_algorithms(start, goal, moves, config=config, catalog=catalog)
    except (AlgFinderError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    found = 0
    try:
        with stream:
            for batch in stream.batches():
                print(f"== {batch.depth} ==")
                for alg in batch.algorithms:
                    if args.limit is not None and found >= args.limit:
                        break
                    print(format_algorithm(alg) if alg else "(vacío)")
                    found += 1
                sys.stdout.flush()
                if args.limit is not None and found >= args.limit:
                    break
    except KeyboardInterrupt:
        logger.info("Interrumpido por el usuario")
        return 130

    reason = stream.end.reason.value if stream.end is not None else "cancelled"
    print(f"-- {found} algoritmos ({reason})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
