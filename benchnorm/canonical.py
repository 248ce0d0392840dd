"""
Canonicalization of free-text hardware and technology names.

Each function is pure and maps arbitrary user input onto the closed
vocabulary defined in ``rules``. Unrecognized input is passed through
rather than rejected.
"""

from __future__ import annotations

import re
from typing import Optional

from .rules import (
    DEFAULT_UPSCALING,
    GPU_RULES,
    NO_UPSCALING_EXACT,
    NO_UPSCALING_SUBSTRINGS,
    NVIDIA_SERIES_BY_DIGIT,
    UNKNOWN,
    UPSCALER_TOKENS,
    VERDICT_MAP,
)

_FOUR_DIGITS_RE = re.compile(r"\b([0-9]{4})\b")
_RX_MODEL_RE = re.compile(r"RX\s*([0-9]{4})", re.I)
_RTX_MODEL_RE = re.compile(r"RTX\s*([0-9]{4})", re.I)
_RYZEN_RE = re.compile(r"Ryzen\s+([0-9]+)\s+([0-9]{4}X?3?D?)", re.I)
_INTEL_CORE_RE = re.compile(r"Core\s+i([0-9]+)[-\s]([0-9]{4,5}K?F?)", re.I)


def _match_rule_table(upper: str) -> Optional[str]:
    for required, canonical in GPU_RULES:
        if all(token in upper for token in required):
            return canonical
    return None


def _nvidia_fallback(upper: str) -> str:
    m = _FOUR_DIGITS_RE.search(upper)
    if m:
        model = m.group(1)
        series = NVIDIA_SERIES_BY_DIGIT.get(model[0])
        if series:
            return f"{series} {model}"

    if "RTX" in upper:
        return "RTX GPU"
    if "GTX" in upper:
        return "GTX GPU"
    return "NVIDIA GPU"


def _amd_fallback(upper: str) -> str:
    m = _RX_MODEL_RE.search(upper)
    if m:
        return f"RX {m.group(1)}"
    return "AMD GPU"


def _laptop_fallback(upper: str) -> str:
    m = _FOUR_DIGITS_RE.search(upper)
    if m:
        for line in ("RTX", "GTX", "RX"):
            if line in upper:
                return f"{line} {m.group(1)} Laptop"
    return "Laptop GPU"


def _variant_fallback(upper: str) -> Optional[str]:
    if "RTX" not in upper:
        return None
    m = _RTX_MODEL_RE.search(upper)
    if not m:
        return None
    if "TI" in upper:
        return f"RTX {m.group(1)} Ti"
    if "SUPER" in upper:
        return f"RTX {m.group(1)} Super"
    return None


def canonicalize_gpu(name: Optional[str]) -> str:
    """
    Map a free-text GPU name to its canonical model name.

    Rules (first match wins):
    - the explicit model table in ``rules.GPU_RULES``
    - GeForce/NVIDIA names: RTX/GTX + first bare 4-digit model number
    - Radeon/AMD names: RX + model number
    - mobile/laptop parts: "<line> <model> Laptop"
    - RTX names with a Ti/Super suffix
    - anything else is returned unchanged
    """
    if not name:
        return UNKNOWN

    upper = name.upper()

    canonical = _match_rule_table(upper)
    if canonical is not None:
        return canonical

    if "GEFORCE" in upper or "NVIDIA" in upper:
        return _nvidia_fallback(upper)

    if "RADEON" in upper or "AMD" in upper:
        return _amd_fallback(upper)

    if "RTX ASTRAL" in upper:
        return "RTX Astral"

    if "MOBILE" in upper or "LAPTOP" in upper:
        return _laptop_fallback(upper)

    variant = _variant_fallback(upper)
    if variant is not None:
        return variant

    return name


def canonicalize_cpu(name: Optional[str]) -> str:
    if not name:
        return UNKNOWN

    s = name.strip()

    if "Ryzen" in s:
        m = _RYZEN_RE.search(s)
        if m:
            return f"Ryzen {m.group(1)} {m.group(2)}"

    if "Core" in s:
        m = _INTEL_CORE_RE.search(s)
        if m:
            return f"Core i{m.group(1)}-{m.group(2)}"

    return s


def canonicalize_verdict(verdict: Optional[str]) -> str:
    """Map a verdict onto the fixed rating scale; unknown labels keep their text."""
    if not verdict:
        return UNKNOWN

    s = str(verdict).strip()
    if s.endswith("."):
        s = s[:-1]
    if not s:
        return UNKNOWN

    upper = s.upper()
    for key, value in VERDICT_MAP.items():
        if upper == key or key in upper:
            return value

    # passthrough, only the leading letter is capitalised
    return s[:1].upper() + s[1:]


def canonicalize_upscaling(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_UPSCALING

    upper = value.upper()
    for token, canonical in UPSCALER_TOKENS:
        if token in upper:
            return canonical

    if any(token in upper for token in NO_UPSCALING_SUBSTRINGS) or upper in NO_UPSCALING_EXACT:
        return DEFAULT_UPSCALING

    return value
