"""
Set Combinators - Signal Composition
=====================================
Operaciones de conjuntos que conservan el orden del primer operando.
Se usan para combinar rankings ("top valor ∧ top rendimiento") y salidas
de detectores ("subida ∧ verdes", "cruce 10 velas ∖ cruce 3 velas").
"""

from typing import Callable, Iterable, List, Sequence

from src.logic.detectors import DetectorResult


SymbolCombinator = Callable[[Sequence[str], Sequence[str]], List[str]]


def intersect(primary: Sequence[str], secondary: Iterable[str]) -> List[str]:
    """Miembros de `primary` presentes en `secondary`, en el orden de `primary`."""
    others = set(secondary)
    return [symbol for symbol in primary if symbol in others]


def exclude(symbols: Sequence[str], excluded: Iterable[str]) -> List[str]:
    """Miembros de `symbols` que no están en `excluded`, orden conservado."""
    banned = set(excluded)
    return [symbol for symbol in symbols if symbol not in banned]


def union(primary: Sequence[str], secondary: Sequence[str]) -> List[str]:
    """`primary` seguido de los miembros nuevos de `secondary`."""
    seen = set()
    merged: List[str] = []
    for symbol in list(primary) + list(secondary):
        if symbol not in seen:
            seen.add(symbol)
            merged.append(symbol)
    return merged


def combine_results(
    name: str,
    first: DetectorResult,
    second: DetectorResult,
    operation: SymbolCombinator = intersect
) -> DetectorResult:
    """
    Combina dos resultados de detectores.

    Si alguno falló, la combinación también falla indicando qué entrada falló.

    Args:
        name: Nombre del resultado combinado
        first: Resultado que define el orden
        second: Resultado secundario
        operation: intersect, exclude o union

    Returns:
        DetectorResult: Resultado combinado
    """
    failed = [result for result in (first, second) if not result.ok]
    if failed:
        reason = "; ".join(f"{result.name}: {result.error}" for result in failed)
        return DetectorResult.failure(name, reason)

    return DetectorResult.success(name, operation(first.symbols, second.symbols))
