# rubik_algfinder/logic/moves.py
from __future__ import annotations

from typing import Iterable, List, Set

from rubik_algfinder.core.cube_model import LAYER_MOVES

VALID_BASES: Set[str] = set(LAYER_MOVES)
VALID_SUFFIX: Set[str] = {"", "'", "2"}

# Cuartos de vuelta horarios <-> sufijo
AMOUNT_SUFFIX = {1: "", 2: "2", 3: "'"}
SUFFIX_AMOUNT = {s: a for a, s in AMOUNT_SUFFIX.items()}


def normalize_token(tok: str) -> str:
    """Normaliza un token de movimiento a un formato estándar.

    Reglas principales:
    - Elimina espacios y convierte comilla tipográfica (’ o ‘) a comilla simple (').
    - Acepta una base (caras, slices, giros dobles o rotaciones) con sufijo opcional:
        - ""  (ej: "R")
        - "'" (ej: "R'")
        - "2" (ej: "R2")
    - Corrige el caso típico "D2'" -> "D2" (ya que el inverso de un 180° es el mismo).

    Args:
        tok: Token de movimiento (por ejemplo: "R", "U'", "F2", "D2'", "M").

    Returns:
        Token normalizado (por ejemplo: "D2'" -> "D2").

    Raises:
        ValueError: Si la base no es válida o si el sufijo no es válido.
    """
    tok = tok.strip().replace("’", "'").replace("‘", "'")
    if not tok:
        return ""

    base = tok[0]
    suf = tok[1:]

    if base not in VALID_BASES:
        raise ValueError(f"Movimiento inválido: {tok}")

    # Corrección: "D2'" -> "D2"
    if suf == "2'":
        suf = "2"

    if suf not in VALID_SUFFIX:
        raise ValueError(f"Sufijo inválido en: {tok}")

    return base + suf


def split_move(m: str) -> tuple[str, int]:
    """Separa un token en (base, cuartos de vuelta horarios).

    Ejemplos:
        - "R"  -> ("R", 1)
        - "R2" -> ("R", 2)
        - "R'" -> ("R", 3)

    Raises:
        ValueError: Si `m` no es un token válido o está vacío.
    """
    m = normalize_token(m)
    if not m:
        raise ValueError("Movimiento vacío")
    return m[0], SUFFIX_AMOUNT[m[1:]]


def join_move(base: str, amount: int) -> str:
    """Inverso de `split_move`: arma el nombre del giro a partir de base y cantidad."""
    return base + AMOUNT_SUFFIX[amount % 4]


def inverse_move(m: str) -> str:
    """Devuelve el movimiento inverso de un token.

    Ejemplos:
        - "R"  -> "R'"
        - "R'" -> "R"
        - "R2" -> "R2"

    Args:
        m: Movimiento en notación estándar (o normalizable), por ejemplo: "R", "U'", "F2".

    Returns:
        El movimiento inverso. Si `m` es un string vacío, retorna "".

    Raises:
        ValueError: Si `m` no es un token válido.
    """
    m = normalize_token(m)
    if not m:
        return m

    base, amount = split_move(m)
    return join_move(base, 4 - amount)


def parse_sequence(text: str) -> List[str]:
    """Convierte una secuencia escrita como texto en una lista de movimientos normalizados.

    La entrada debe separar movimientos por espacios (o comas). Por ejemplo:
        "R U R' U'" -> ["R", "U", "R'", "U'"]

    Args:
        text: Secuencia de movimientos escrita como string.

    Returns:
        Lista de tokens normalizados, en el mismo orden.

    Raises:
        ValueError: Si algún token es inválido.
    """
    tokens = [t for t in text.replace(",", " ").strip().split() if t.strip()]
    out: List[str] = []
    for t in tokens:
        out.append(normalize_token(t))
    return out


def format_algorithm(turns: Iterable[object]) -> str:
    """Convierte un algoritmo (giros o nombres) en texto listo para copiar.

    Ejemplo:
        [R, U, R'] -> "R U R'"
    """
    return " ".join(str(t) for t in turns)
