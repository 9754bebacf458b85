"""Signed distance primitives for the sdfray package.

Re-exports all shared helpers from :mod:`sdfray._common`, then adds the
sphere and capsule SDFs.

All functions accept and return ``numpy.ndarray`` objects and support
broadcasting over arbitrary leading batch dimensions.  A "point array" *p*
has shape ``(..., 3)``; scalar SDF results have shape ``(...,)``.

Formulas are adapted from Inigo Quilez's distance function reference:
https://iquilezles.org/articles/distfunctions/
"""

import numpy as np

from ._common import *  # noqa: F401, F403  re-export shared helpers
from ._common import _F, clamp, dot, dot2, length, safe_div


def sdSphere(p: _F, c: _F, r: float) -> _F:
    """Sphere of radius *r* centred at *c*: ``|p - c| - r``."""
    return length(np.asarray(p, dtype=float) - c) - r


def sdCapsule(p: _F, a: _F, b: _F, r: float) -> _F:
    """Capsule from *a* to *b* with radius *r*.

    The projection of ``p - a`` onto the axis is clamped to the segment, so
    points beyond either end measure against the hemispherical caps.  A
    zero-length axis degrades to a sphere of radius *r* at *a*.
    """
    pa = np.asarray(p, dtype=float) - a
    ba = np.asarray(b, dtype=float) - a
    h = clamp(safe_div(dot(pa, ba), dot2(ba)), 0.0, 1.0)
    return length(pa - ba * np.asarray(h)[..., None]) - r
