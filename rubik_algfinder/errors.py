# rubik_algfinder/errors.py
from __future__ import annotations


class AlgFinderError(Exception):
    """Base de los errores propios del buscador de algoritmos."""


class ShapeMismatch(AlgFinderError, ValueError):
    """El arreglo de facelets no tiene el largo que exige la geometría del cubo."""


class EmptyMoveSet(AlgFinderError, ValueError):
    """El conjunto de giros permitidos está vacío (la búsqueda no tiene sentido)."""


class UnknownTurn(AlgFinderError, LookupError):
    """Se pidió un giro que no existe en el catálogo."""
