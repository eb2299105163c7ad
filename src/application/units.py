# mealdeal/src/application/units.py
from __future__ import annotations

from typing import Dict, Optional, Tuple

# token -> (family, factor to the family's smallest unit)
_UNITS: Dict[str, Tuple[str, float]] = {
    "g": ("mass", 1.0),
    "gram": ("mass", 1.0),
    "gramm": ("mass", 1.0),
    "kg": ("mass", 1000.0),
    "kilogram": ("mass", 1000.0),
    "kilogramm": ("mass", 1000.0),
    "ml": ("volume", 1.0),
    "milliliter": ("volume", 1.0),
    "l": ("volume", 1000.0),
    "liter": ("volume", 1000.0),
}

# count-like tokens that all mean "one piece"
_PIECE_SYNONYMS = {"stk", "stück", "stueck", "piece", "pcs", "pc"}


def normalize_unit(unit: Optional[str]) -> str:
    u = (unit or "").strip().lower()
    if u in _PIECE_SYNONYMS:
        return "piece"
    return u


def convert(qty: float, from_unit: Optional[str], to_unit: Optional[str]) -> Optional[float]:
    """
    Convert qty between units of the same family (mass g/kg, volume ml/l).
    Equal tokens (after normalization) are the identity.
    Returns None when the pair cannot be converted; never guesses.
    """
    src = normalize_unit(from_unit)
    dst = normalize_unit(to_unit)
    if src == dst:
        return qty

    a = _UNITS.get(src)
    b = _UNITS.get(dst)
    if a is None or b is None or a[0] != b[0]:
        return None
    return qty * a[1] / b[1]
