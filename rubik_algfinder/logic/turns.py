# rubik_algfinder/logic/turns.py
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from operator import itemgetter
from typing import (
    AbstractSet,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from rubik_algfinder.core.cube_model import CubeGeometry, Permutation
from rubik_algfinder.core.facelets import FaceletState, Facelets
from rubik_algfinder.errors import EmptyMoveSet, UnknownTurn
from rubik_algfinder.logic.moves import join_move, normalize_token, parse_sequence

FACE_BASES: Tuple[str, ...] = ("U", "D", "L", "R", "F", "B")
SLICE_BASES: Tuple[str, ...] = ("M", "E", "S")
WIDE_BASES: Tuple[str, ...] = ("u", "d", "l", "r", "f", "b")
ROTATION_BASES: Tuple[str, ...] = ("x", "y", "z")

CATALOG_PRESETS: Dict[str, Tuple[str, ...]] = {
    "faces": FACE_BASES,
    "faces+M": FACE_BASES + ("M",),
    "slices": FACE_BASES + SLICE_BASES,
    "full": FACE_BASES + SLICE_BASES + WIDE_BASES + ROTATION_BASES,
}

# Orden de cantidades dentro de cada base: X, X', X2
AMOUNTS: Tuple[int, ...] = (1, 3, 2)


@dataclass(frozen=True)
class Turn:
    """Giro del catálogo: una permutación con nombre de las posiciones de facelets.

    Attributes:
        name: Nombre en notación estándar ("R", "R'", "R2").
        base: Capa que gira ("R").
        amount: Cuartos de vuelta horarios (1, 2 o 3; 3 equivale a "'").
        permutation: Tabla con `nuevo[j] = viejo[permutation[j]]`.
    """

    name: str
    base: str
    amount: int
    permutation: Permutation = field(repr=False, compare=False)
    _getter: Callable[[Facelets], Facelets] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_getter", itemgetter(*self.permutation))

    def __str__(self) -> str:
        return self.name

    def permute(self, facelets: Facelets) -> Facelets:
        """Aplica la permutación a una tupla cruda de facelets."""
        return self._getter(facelets)


Algorithm = Tuple[Turn, ...]
TurnLike = Union[Turn, str]
# (base, cuartos de vuelta acumulados por los giros finales sobre esa base)
RunKey = Tuple[str, int]
FollowerTable = Dict[Optional[RunKey], Tuple[Tuple[Turn, RunKey], ...]]


class TurnCatalog:
    """Catálogo cerrado e inmutable de giros.

    Cada base se expande a tres giros (X, X', X2), en el orden de `bases`.
    Las tablas de permutación se calculan una sola vez a partir de la geometría
    (`CubeGeometry`) y no se modifican después.
    """

    def __init__(self, bases: Sequence[str] = FACE_BASES) -> None:
        """Compila el catálogo.

        Args:
            bases: Letras de las capas a incluir, por ejemplo ("U", "R", "M").

        Raises:
            ValueError: Si alguna base no está soportada o está repetida.
        """
        if len(set(bases)) != len(bases):
            raise ValueError(f"Bases repetidas en el catálogo: {list(bases)}")

        geometry = CubeGeometry()
        self.bases: Tuple[str, ...] = tuple(bases)

        turns: List[Turn] = []
        for base in self.bases:
            for amount in AMOUNTS:
                turns.append(
                    Turn(
                        name=join_move(base, amount),
                        base=base,
                        amount=amount,
                        permutation=geometry.permutation(base, amount),
                    )
                )
        self.turns: Tuple[Turn, ...] = tuple(turns)
        self._by_name: Dict[str, Turn] = {t.name: t for t in self.turns}
        self._by_base_amount: Dict[Tuple[str, int], Turn] = {
            (t.base, t.amount): t for t in self.turns
        }

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

    def __len__(self) -> int:
        return len(self.turns)

    def __contains__(self, turn: object) -> bool:
        if isinstance(turn, Turn):
            return self._by_name.get(turn.name) == turn
        return isinstance(turn, str) and turn in self._by_name

    # --------------------------
    # Lookup
    # --------------------------
    def get(self, name: TurnLike) -> Turn:
        """Busca un giro por nombre.

        Raises:
            UnknownTurn: Si el giro no está en el catálogo.
        """
        if isinstance(name, Turn):
            name = name.name
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownTurn(f"Giro fuera del catálogo: {name!r}") from None

    def resolve(self, moves: Iterable[TurnLike]) -> Tuple[Turn, ...]:
        """Convierte un conjunto de giros permitidos a tupla en orden de catálogo.

        Los nombres se normalizan ("R2'" -> "R2") y se eliminan repetidos.

        Raises:
            UnknownTurn: Si algún giro no está en el catálogo.
            EmptyMoveSet: Si el conjunto queda vacío.
        """
        wanted = set()
        for m in moves:
            name = m.name if isinstance(m, Turn) else normalize_token(m)
            if name:
                wanted.add(self.get(name))
        if not wanted:
            raise EmptyMoveSet("El conjunto de giros permitidos está vacío")
        return tuple(t for t in self.turns if t in wanted)

    def parse(self, text: str) -> Algorithm:
        """Parsea una secuencia en notación ("R U R' U'") a giros del catálogo."""
        return tuple(self.get(name) for name in parse_sequence(text))

    # --------------------------
    # Algebra
    # --------------------------
    def inverse(self, turn: TurnLike) -> Turn:
        turn = self.get(turn)
        return self._by_base_amount[(turn.base, 4 - turn.amount)]

    def combine(self, first: Turn, second: Turn) -> Optional[Turn]:
        """Compone dos giros de la misma base.

        Returns:
            El giro equivalente, o None si la composición es la identidad.

        Raises:
            ValueError: Si los giros son de bases distintas.
        """
        if first.base != second.base:
            raise ValueError(f"No se pueden combinar {first} y {second}")
        amount = (first.amount + second.amount) % 4
        if amount == 0:
            return None
        return self._by_base_amount[(first.base, amount)]

    def run_after(self, run: Optional[RunKey], turn: Turn) -> RunKey:
        """Racha de giros sobre la misma base que queda después de aplicar `turn`."""
        if run is None or run[0] != turn.base:
            return (turn.base, turn.amount)
        return (turn.base, (run[1] + turn.amount) % 4)

    def run_of(self, turns: Iterable[Turn]) -> Optional[RunKey]:
        """Racha final de una secuencia (None si está vacía)."""
        run: Optional[RunKey] = None
        for turn in turns:
            run = self.run_after(run, turn)
        return run

    def can_follow(
        self,
        prev: Union[Turn, RunKey, None],
        turn: Turn,
        allowed: AbstractSet[Turn],
    ) -> bool:
        """Regla de poda para agregar `turn` después de `prev`.

        `prev` es el giro anterior o la racha acumulada sobre su base. Un giro
        sobre la misma base se descarta si la racha completa queda en la
        identidad o equivale a un giro permitido (por ejemplo "R R" cuando
        "R2" está permitido, o "R R R" cuando "R'" lo está).
        """
        if isinstance(prev, Turn):
            prev = (prev.base, prev.amount)
        if prev is None or prev[0] != turn.base:
            return True
        amount = (prev[1] + turn.amount) % 4
        return amount != 0 and self._by_base_amount[(turn.base, amount)] not in allowed

    def accepts(self, turns: Sequence[Turn], allowed: AbstractSet[Turn]) -> bool:
        """True si ninguna posición de la secuencia cae en la regla de poda."""
        run: Optional[RunKey] = None
        for turn in turns:
            if not self.can_follow(run, turn, allowed):
                return False
            run = self.run_after(run, turn)
        return True

    def followers(self, allowed: Sequence[Turn]) -> FollowerTable:
        """Tabla racha -> pares (giro permitido, racha resultante) (None = raíz).

        Incluye todas las rachas alcanzables: cada base de `allowed` con 1, 2 o 3
        cuartos de vuelta acumulados.
        """
        allowed_set = frozenset(allowed)
        runs: List[Optional[RunKey]] = [None]
        for base in dict.fromkeys(t.base for t in allowed):
            runs.extend((base, amount) for amount in (1, 2, 3))

        table: FollowerTable = {}
        for run in runs:
            table[run] = tuple(
                (t, self.run_after(run, t))
                for t in allowed
                if self.can_follow(run, t, allowed_set)
            )
        return table

    def apply_sequence(
        self, state: FaceletState, turns: Iterable[TurnLike]
    ) -> FaceletState:
        """Aplica una secuencia de giros (nombres o `Turn`) a un estado."""
        return state.apply_sequence(self.get(t) for t in turns)


@lru_cache(maxsize=None)
def get_catalog(bases: Tuple[str, ...] = FACE_BASES) -> TurnCatalog:
    """Catálogo compilado y cacheado por proceso para las bases dadas."""
    return TurnCatalog(bases)


def catalog_from_preset(name: str) -> TurnCatalog:
    """Devuelve el catálogo de un preset ("faces", "faces+M", "slices", "full").

    Raises:
        ValueError: Si el preset no existe.
    """
    try:
        return get_catalog(CATALOG_PRESETS[name])
    except KeyError:
        raise ValueError(f"Catálogo desconocido: {name}") from None
