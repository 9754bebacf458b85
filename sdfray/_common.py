"""Shared helpers used by the distance, raycast and geometry modules.

This module provides:

* **Type alias**: :data:`_F`
* **Vector coercion**: :func:`as_vec3`
* **Math helpers**: :func:`length`, :func:`dot`, :func:`dot2`, :func:`clamp`,
  :func:`safe_div`, :func:`normalize`
* **Boolean operators** over signed distances:
  :func:`opUnion`, :func:`opSubtraction`, :func:`opIntersection`,
  :func:`opXor`

Not meant to be imported directly by end users; import from
``sdfray.primitives`` or ``sdfray`` instead.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------
_F = npt.NDArray[np.floating]

# Denominators smaller than this are nudged away from zero by safe_div.
SAFE_DIV_EPS = 1e-12

__all__ = [
    "_F",
    "SAFE_DIV_EPS",
    "as_vec3",
    "length", "dot", "dot2", "clamp", "safe_div", "normalize",
    "opUnion", "opSubtraction", "opIntersection", "opXor",
]


# ===========================================================================
# Vector coercion
# ===========================================================================

def as_vec3(v) -> _F:
    """Coerce *v* to a float ``(3,)`` array.

    Raises
    ------
    ValueError
        If *v* does not hold exactly three components.
    """
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {arr.shape}")
    return arr


# ===========================================================================
# Math helpers
# ===========================================================================

def length(v: _F) -> _F:
    """Euclidean length along the last axis."""
    return np.linalg.norm(v, axis=-1)


def dot(a: _F, b: _F) -> _F:
    """Dot product along the last axis."""
    return np.sum(a * b, axis=-1)


def dot2(a: _F) -> _F:
    """Squared length: ``dot(a, a)``."""
    return dot(a, a)


def clamp(x: _F, lo: float | _F, hi: float | _F) -> _F:
    """Clamp *x* element-wise to ``[lo, hi]``."""
    return np.minimum(np.maximum(x, lo), hi)


def safe_div(n: _F, d: _F, eps: float = SAFE_DIV_EPS) -> _F:
    """Division that avoids exact zero in the denominator."""
    return n / np.where(np.abs(d) < eps, np.sign(d) * eps + eps, d)


def normalize(v: _F) -> _F:
    """Unit vector along the last axis.  Zero vectors come back as NaN."""
    return v / np.linalg.norm(v, axis=-1, keepdims=True)


# ===========================================================================
# Boolean operators
# ===========================================================================

def opUnion(d1: _F, d2: _F) -> _F:
    """Union of two SDFs: ``min(d1, d2)``."""
    return np.minimum(d1, d2)


def opSubtraction(d1: _F, d2: _F) -> _F:
    """Subtract *d1* from *d2*: ``max(-d1, d2)``."""
    return np.maximum(-d1, d2)


def opIntersection(d1: _F, d2: _F) -> _F:
    """Intersection of two SDFs: ``max(d1, d2)``."""
    return np.maximum(d1, d2)


def opXor(d1: _F, d2: _F) -> _F:
    """Exclusive-or of two SDFs: ``max(min(d1, d2), -max(d1, d2))``."""
    return np.maximum(np.minimum(d1, d2), -np.maximum(d1, d2))
