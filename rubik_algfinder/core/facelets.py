# rubik_algfinder/core/facelets.py
from __future__ import annotations

from operator import itemgetter
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, Tuple

from rubik_algfinder.core.cube_model import FACELET_COUNT, FACES, STICKERS_PER_FACE
from rubik_algfinder.errors import ShapeMismatch

Color = str  # Letras: "W", "Y", "O", "R", "G", "B"
Facelets = Tuple[Color, ...]
Matcher = Callable[[Facelets], bool]

WILDCARD: Color = "_"
WILDCARD_ALIASES = {"_", "."}

COLORS: List[Color] = ["W", "Y", "O", "R", "G", "B"]
COLORS_SOLVED: Dict[str, Color] = {
    "U": "W",
    "D": "Y",
    "L": "O",
    "R": "R",
    "F": "G",
    "B": "B",
}

# Posiciones de esquina dentro de una cara (layout fila-columna)
CORNER_POSITIONS = (0, 2, 6, 8)


class FaceletState:
    """Estado inmutable del cubo: un arreglo de 54 facelets.

    Cada valor es un color concreto o `WILDCARD` ("no importa"). El orden es
    U, D, L, R, F, B, con 9 stickers por cara en layout fila-columna (ver
    `rubik_algfinder.core.cube_model.CubeGeometry`).

    Los estados son valores: aplicar un giro produce un estado nuevo, por lo que
    se pueden compartir entre hilos sin sincronización.
    """

    __slots__ = ("_facelets",)

    def __init__(self, facelets: Iterable[Color]) -> None:
        """Crea un estado a partir de una secuencia de facelets.

        Args:
            facelets: Secuencia de 54 colores (o `WILDCARD`).

        Raises:
            ShapeMismatch: Si la secuencia no tiene exactamente 54 elementos.
        """
        data = tuple(facelets)
        if len(data) != FACELET_COUNT:
            raise ShapeMismatch(
                f"Se esperaban {FACELET_COUNT} facelets, se recibieron {len(data)}"
            )
        self._facelets: Facelets = data

    @classmethod
    def solved(cls) -> FaceletState:
        """Estado resuelto (cada cara de un solo color)."""
        return cls(COLORS_SOLVED[f] for f in FACES for _ in range(STICKERS_PER_FACE))

    @classmethod
    def wildcard(cls) -> FaceletState:
        """Estado con todos los facelets en `WILDCARD`."""
        return cls([WILDCARD] * FACELET_COUNT)

    @classmethod
    def from_string(cls, text: str) -> FaceletState:
        """Parsea un estado escrito como texto.

        Se ignoran los espacios y saltos de línea, así que las caras pueden
        agruparse libremente. "_" y "." representan un facelet comodín.

        Args:
            text: 54 caracteres de color, por ejemplo "WWWWWWWWW YYYYYYYYY ...".

        Raises:
            ShapeMismatch: Si el texto no contiene 54 facelets.
            ValueError: Si algún carácter no es un color ni un comodín.
        """
        tags: List[Color] = []
        for ch in text:
            if ch.isspace():
                continue
            if ch in WILDCARD_ALIASES:
                tags.append(WILDCARD)
            elif ch.upper() in COLORS:
                tags.append(ch.upper())
            else:
                raise ValueError(f"Color desconocido: {ch!r} (válidos: {''.join(COLORS)} y _)")
        return cls(tags)

    # --------------------------
    # Value semantics
    # --------------------------
    @property
    def facelets(self) -> Facelets:
        return self._facelets

    def __len__(self) -> int:
        return len(self._facelets)

    def __iter__(self) -> Iterator[Color]:
        return iter(self._facelets)

    def __getitem__(self, index: int) -> Color:
        return self._facelets[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FaceletState):
            return NotImplemented
        return self._facelets == other._facelets

    def __hash__(self) -> int:
        return hash(self._facelets)

    def __repr__(self) -> str:
        return f"FaceletState({self.to_string()!r})"

    # --------------------------
    # Public API
    # --------------------------
    def face(self, face: str) -> Facelets:
        """Devuelve los 9 stickers de una cara."""
        f = FACES.index(face)  # type: ignore[arg-type]
        return self._facelets[f * STICKERS_PER_FACE:(f + 1) * STICKERS_PER_FACE]

    def is_wildcard(self, index: int) -> bool:
        return self._facelets[index] == WILDCARD

    def with_wildcards(self, indices: Iterable[int]) -> FaceletState:
        """Copia del estado con los índices dados convertidos en comodín."""
        data = list(self._facelets)
        for i in indices:
            data[i] = WILDCARD
        return FaceletState(data)

    def keep_only(self, indices: Iterable[int]) -> FaceletState:
        """Copia del estado donde todo lo que no está en `indices` es comodín."""
        keep = set(indices)
        return FaceletState(
            c if i in keep else WILDCARD for i, c in enumerate(self._facelets)
        )

    def apply(self, turn) -> FaceletState:
        """Aplica un giro y retorna el estado resultante (no modifica `self`)."""
        return apply(self, turn)

    def apply_sequence(self, turns: Iterable) -> FaceletState:
        """Aplica una secuencia de giros (fold izquierdo de `apply`)."""
        state = self
        for t in turns:
            state = apply(state, t)
        return state

    def matches(self, goal: FaceletState) -> bool:
        return matches(self, goal)

    def to_string(self, grouped: bool = True) -> str:
        """Texto con los 54 facelets; con `grouped` separa las caras por espacios."""
        if not grouped:
            return "".join(self._facelets)
        return " ".join("".join(self.face(f)) for f in FACES)

    def to_net(self) -> str:
        """Dibuja el cubo desplegado (en cruz) para consola.

        Layout:
                U
              L F R B
                D
        """

        def rows(face: str) -> List[str]:
            s = self.face(face)
            return ["".join(s[r * 3:r * 3 + 3]) for r in range(3)]

        pad = " " * 4
        lines = [pad + row for row in rows("U")]
        side = [rows(f) for f in ("L", "F", "R", "B")]
        for r in range(3):
            lines.append(" ".join(face_rows[r] for face_rows in side))
        lines.extend(pad + row for row in rows("D"))
        return "\n".join(lines)


def apply(state: FaceletState, turn) -> FaceletState:
    """Aplica un giro a un estado.

    Args:
        state: Estado de partida.
        turn: Objeto con `permute(facelets) -> facelets` (ver `logic.turns.Turn`).

    Returns:
        Un estado nuevo.
    """
    return FaceletState(turn.permute(state.facelets))


def _check_shape(a: Sequence[Color], b: Sequence[Color]) -> None:
    if len(a) != len(b):
        raise ShapeMismatch(
            f"Estados de distinto largo: {len(a)} y {len(b)}"
        )


def matches(candidate: FaceletState, goal: FaceletState) -> bool:
    """Indica si `candidate` cumple el patrón `goal`.

    Compara en una dirección fija: cada posición no comodín del objetivo debe
    tener el mismo color en el candidato. Un comodín en el candidato no
    coincide con un color concreto del objetivo.

    Raises:
        ShapeMismatch: Si los estados tienen distinto largo.
    """
    _check_shape(candidate, goal)
    return compile_matcher(goal)(candidate.facelets)


def compile_matcher(goal: Sequence[Color]) -> Matcher:
    """Compila el patrón `goal` a un predicado rápido sobre tuplas de facelets.

    Se usa en el camino caliente de la búsqueda: solo compara las posiciones
    concretas del objetivo.
    """
    checked = [i for i, c in enumerate(goal) if c != WILDCARD]
    if not checked:
        return lambda facelets: True

    if len(checked) == 1:
        i = checked[0]
        color = goal[i]
        return lambda facelets: facelets[i] == color

    getter = itemgetter(*checked)
    expected = getter(tuple(goal))
    return lambda facelets: getter(facelets) == expected


def _color_counts(state: FaceletState) -> Tuple[Dict[Color, int], Dict[Color, int]]:
    corners: Dict[Color, int] = {c: 0 for c in COLORS}
    others: Dict[Color, int] = {c: 0 for c in COLORS}
    for idx, color in enumerate(state):
        if color not in corners:
            continue
        if idx % STICKERS_PER_FACE in CORNER_POSITIONS:
            corners[color] += 1
        else:
            others[color] += 1
    return corners, others


def count_missing(start: FaceletState, goal: FaceletState) -> Dict[Color, int]:
    """Cuenta cuántos stickers de cada color faltan en `start` para poder llegar a `goal`.

    Las esquinas y el resto de posiciones se cuentan por separado, ya que un
    sticker de esquina nunca puede terminar en una arista (ni viceversa).
    Solo lo usa la UI para advertir "faltan colores"; la búsqueda no lo consulta.

    Args:
        start: Estado de partida.
        goal: Estado objetivo (con comodines).

    Returns:
        Dict color -> déficit, solo con los colores que tienen déficit > 0.

    Raises:
        ShapeMismatch: Si los estados tienen distinto largo.
    """
    _check_shape(start, goal)
    start_corners, start_others = _color_counts(start)
    goal_corners, goal_others = _color_counts(goal)

    missing: Dict[Color, int] = {}
    for color in COLORS:
        deficit = max(0, goal_corners[color] - start_corners[color])
        deficit += max(0, goal_others[color] - start_others[color])
        if deficit:
            missing[color] = deficit
    return missing
