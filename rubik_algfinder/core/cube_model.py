# rubik_algfinder/core/cube_model.py
from __future__ import annotations

from typing import Dict, List, Literal, Tuple

Face = Literal["U", "D", "L", "R", "F", "B"]
Axis = Literal["x", "y", "z"]
Vec3i = Tuple[int, int, int]
Permutation = Tuple[int, ...]

FACES: List[Face] = ["U", "D", "L", "R", "F", "B"]
STICKERS_PER_FACE = 9
FACELET_COUNT = len(FACES) * STICKERS_PER_FACE

# Normales por cara (x, y, z)
FACE_NORMAL: Dict[Face, Vec3i] = {
    "U": (0, 1, 0),
    "D": (0, -1, 0),
    "L": (-1, 0, 0),
    "R": (1, 0, 0),
    "F": (0, 0, 1),
    "B": (0, 0, -1),
}

# base -> (eje, capas que gira, cuartos de vuelta alrededor del eje positivo)
# Un giro horario visto desde afuera de la cara es -90° alrededor de su normal.
LAYER_MOVES: Dict[str, Tuple[Axis, Tuple[int, ...], int]] = {
    # Caras
    "U": ("y", (1,), -1),
    "D": ("y", (-1,), +1),
    "L": ("x", (-1,), +1),
    "R": ("x", (1,), -1),
    "F": ("z", (1,), -1),
    "B": ("z", (-1,), +1),
    # Slices (M sigue a L, E sigue a D, S sigue a F)
    "M": ("x", (0,), +1),
    "E": ("y", (0,), +1),
    "S": ("z", (0,), -1),
    # Giros dobles (cara + slice adyacente)
    "u": ("y", (1, 0), -1),
    "d": ("y", (-1, 0), +1),
    "l": ("x", (-1, 0), +1),
    "r": ("x", (1, 0), -1),
    "f": ("z", (1, 0), -1),
    "b": ("z", (-1, 0), +1),
    # Rotaciones del cubo completo (x sigue a R, y sigue a U, z sigue a F)
    "x": ("x", (-1, 0, 1), -1),
    "y": ("y", (-1, 0, 1), -1),
    "z": ("z", (-1, 0, 1), -1),
}


class CubeGeometry:
    """Geometría del cubo 3x3 usada para derivar las tablas de permutación de los giros.

    Representación:
        - Cada sticker (facelet) se identifica con un índice plano 0..53:
          `FACES.index(cara) * 9 + i`, con `i` en layout fila-columna.
        - Cada cara se lee mirándola desde afuera: U con B arriba, D con F arriba,
          las caras laterales con U arriba.
        - Cada facelet tiene una posición (x, y, z) en {-1, 0, 1}^3 y una normal.

    Rotaciones:
        - Al girar una capa se rotan posición y normal de cada facelet de la capa,
          y se busca qué facelet ocupa el lugar resultante.
        - El resultado es una permutación `perm` tal que `nuevo[j] = viejo[perm[j]]`.
    """

    def __init__(self) -> None:
        """Construye los mapas entre índices de facelet y su representación geométrica."""
        self._facelet_to_pn: Dict[int, Tuple[Vec3i, Vec3i]] = {}
        self._pn_to_facelet: Dict[Tuple[Vec3i, Vec3i], int] = {}
        self._build_facelet_maps()

    # --------------------------
    # Public API
    # --------------------------
    def position(self, index: int) -> Tuple[Vec3i, Vec3i]:
        """Devuelve (posición, normal) del facelet `index`."""
        return self._facelet_to_pn[index]

    def layer_facelets(self, base: str) -> Tuple[int, ...]:
        """Índices de los facelets que mueve un giro de la base dada.

        Raises:
            ValueError: Si la base no está soportada.
        """
        axis, layers, _ = self._layer_move(base)
        k = "xyz".index(axis)
        return tuple(
            idx
            for idx in range(FACELET_COUNT)
            if self._facelet_to_pn[idx][0][k] in layers
        )

    def permutation(self, base: str, turns: int) -> Permutation:
        """Calcula la permutación de un giro `base` aplicado `turns` veces en sentido horario.

        Args:
            base: Letra del giro (por ejemplo: "R", "M", "r", "x").
            turns: Cuartos de vuelta horarios (mod 4). 1 = "X", 2 = "X2", 3 = "X'".

        Returns:
            Tupla de 54 índices con `nuevo[j] = viejo[perm[j]]`.

        Raises:
            ValueError: Si la base no está soportada.
        """
        axis, layers, direction = self._layer_move(base)
        t = (direction * turns) % 4
        k = "xyz".index(axis)

        perm = list(range(FACELET_COUNT))
        for idx in range(FACELET_COUNT):
            pos, n = self._facelet_to_pn[idx]
            if pos[k] not in layers:
                continue

            pos2 = self._rotate(pos, axis, t)
            n2 = self._rotate(n, axis, t)

            # El sticker que estaba en idx pasa a ocupar dest
            dest = self._pn_to_facelet[(pos2, n2)]
            perm[dest] = idx

        return tuple(perm)

    # --------------------------
    # Core rotation logic (geométrica)
    # --------------------------
    @staticmethod
    def _layer_move(base: str) -> Tuple[Axis, Tuple[int, ...], int]:
        try:
            return LAYER_MOVES[base]
        except KeyError:
            raise ValueError(f"Movimiento no soportado: {base}") from None

    def _build_facelet_maps(self) -> None:
        """Construye el mapeo entre stickers (facelets) y su representación geométrica.

        - U: x=c-1, y=+1, z=r-1
        - D: x=c-1, y=-1, z=1-r   (flip Z)
        - L: x=-1, y=1-r, z=c-1
        - R: x=+1, y=1-r, z=1-c   (flip Z)
        - F: x=c-1, y=1-r, z=+1
        - B: x=1-c, y=1-r, z=-1   (flip X)
        """

        def idx_rc(i: int) -> Tuple[int, int]:
            return i // 3, i % 3

        for f, face in enumerate(FACES):
            n = FACE_NORMAL[face]
            for i in range(STICKERS_PER_FACE):
                r, c = idx_rc(i)

                if face == "U":
                    pos: Vec3i = (c - 1, 1, r - 1)
                elif face == "D":
                    pos = (c - 1, -1, 1 - r)
                elif face == "L":
                    pos = (-1, 1 - r, c - 1)
                elif face == "R":
                    pos = (1, 1 - r, 1 - c)
                elif face == "F":
                    pos = (c - 1, 1 - r, 1)
                elif face == "B":
                    pos = (1 - c, 1 - r, -1)
                else:
                    raise RuntimeError("Cara inválida")

                key = f * STICKERS_PER_FACE + i
                self._facelet_to_pn[key] = (pos, n)
                self._pn_to_facelet[(pos, n)] = key

    @classmethod
    def _rotate(cls, v: Vec3i, axis: Axis, turns: int) -> Vec3i:
        if axis == "x":
            return cls._rot_x(v, turns)
        if axis == "y":
            return cls._rot_y(v, turns)
        return cls._rot_z(v, turns)

    @staticmethod
    def _rot_x(v: Vec3i, turns: int) -> Vec3i:
        """Rota un vector 90°*turns alrededor de X (regla de la mano derecha)."""
        x, y, z = v
        turns %= 4
        if turns == 0:
            return (x, y, z)
        if turns == 1:
            return (x, -z, y)
        if turns == 2:
            return (x, -y, -z)
        return (x, z, -y)

    @staticmethod
    def _rot_y(v: Vec3i, turns: int) -> Vec3i:
        """Rota un vector 90°*turns alrededor de Y (regla de la mano derecha)."""
        x, y, z = v
        turns %= 4
        if turns == 0:
            return (x, y, z)
        if turns == 1:
            return (z, y, -x)
        if turns == 2:
            return (-x, y, -z)
        return (-z, y, x)

    @staticmethod
    def _rot_z(v: Vec3i, turns: int) -> Vec3i:
        """Rota un vector 90°*turns alrededor de Z (regla de la mano derecha)."""
        x, y, z = v
        turns %= 4
        if turns == 0:
            return (x, y, z)
        if turns == 1:
            return (-y, x, z)
        if turns == 2:
            return (-x, -y, z)
        return (y, -x, z)
