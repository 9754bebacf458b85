"""Exact ray intersection for the sphere and capsule primitives.

Algorithms
----------
Sphere: classical ray/sphere quadratic.
    Substituting ``p = ro + t*rd`` into ``|p - so|^2 - r^2 = 0`` gives
    ``a*t^2 + b*t + c = 0`` with ``a = rd.rd``, ``b = 2*rd.(ro - so)`` and
    ``c = |ro - so|^2 - r^2``.  The sign of ``b^2 - 4ac`` gives the number
    of line intersections; the sign of each root tells whether the crossing
    lies in front of the ray origin.

Capsule: swept sphere along a segment (https://www.shadertoy.com/view/Xt3SzX).
    A half-b quadratic against the infinite cylinder around ``AB`` gives the
    candidate entry and exit.  Each root is projected onto the axis
    (``y = ba.oa + ba.rd * t``).  Inside ``(0, ba.ba)`` it lies on the body;
    otherwise the crossing is re-solved against the spherical cap at ``A``
    (``y <= 0``) or ``B`` (``y >= ba.ba``).

Classification
--------------
Both shapes share one rule for turning ordered line roots ``t0 <= t1`` into
ray hits, where a root ``t >= 0`` is in front of the origin:

==================  ==========================
roots               hits
==================  ==========================
``t0 == t1 >= 0``   ``TANGENT``
``t0 >= 0``         ``ENTER t0``, ``EXIT t1``
``t0 < 0 <= t1``    ``EXIT t1``
otherwise           none
==================  ==========================

A discriminant that is neither ``< 0``, ``== 0`` nor ``> 0`` (NaN) can only
come from degenerate input such as a zero-length ray direction and raises
:class:`DiscriminantError`.
"""

from __future__ import annotations

import logging
from math import sqrt
from typing import List, Optional, Tuple

from ._common import _F, as_vec3, normalize
from .ray import HitKind, Ray, RayHit

log = logging.getLogger("sdfray")

__all__ = [
    "DiscriminantError",
    "sphIntersect",
    "capIntersect",
    "sphere_hits",
    "capsule_hits",
]

# (t, centre); centre is the point the outward normal is measured from.
_Crossing = Tuple[float, _F]


class DiscriminantError(ArithmeticError):
    """A ray quadratic produced a NaN discriminant."""


def _check_discriminant(disc: float, shape: str) -> None:
    if not (disc < 0.0 or disc == 0.0 or disc > 0.0):
        raise DiscriminantError(
            f"Raycast on {shape} has a discriminant that is not <, = or > 0 "
            f"(got {disc!r}); check for a zero-length ray direction or "
            f"non-finite shape parameters"
        )


def _classify(t0: float, t1: float) -> List[Tuple[HitKind, int]]:
    """Turn ordered line roots into ``(kind, root index)`` ray hits."""
    if t0 == t1:
        return [(HitKind.TANGENT, 0)] if t0 >= 0.0 else []
    if t0 >= 0.0:
        return [(HitKind.ENTER, 0), (HitKind.EXIT, 1)]
    if t1 >= 0.0:
        return [(HitKind.EXIT, 1)]
    return []


def _build_hits(
    ray: Ray,
    rd: _F,
    near: _Crossing,
    far: _Crossing,
) -> Tuple[RayHit, ...]:
    crossings = (near, far) if near[0] <= far[0] else (far, near)
    hits = []
    for kind, i in _classify(crossings[0][0], crossings[1][0]):
        t, centre = crossings[i]
        point = ray.origin + rd * t
        hits.append(RayHit(
            kind=kind,
            ray=ray,
            t=t,
            point=point,
            normal=normalize(point - centre),
        ))
    return tuple(hits)


# ===========================================================================
# Sphere
# ===========================================================================

def sphere_hits(ray: Ray, center: _F, radius: float) -> Tuple[RayHit, ...]:
    """All crossings of *ray* with the sphere at *center*, ordered by ``t``."""
    ro = ray.origin
    rd = ray.unit_direction
    so = as_vec3(center)
    sr = abs(radius)

    # quadratic shorthand
    rs = ro - so
    a = float(rd @ rd)
    b = 2.0 * float(rd @ rs)
    c = float(rs @ rs) - sr * sr
    disc = b * b - 4.0 * a * c

    _check_discriminant(disc, "sphere")
    if disc < 0.0:
        return ()

    a2 = 2.0 * a
    if disc == 0.0:
        t0 = t1 = -b / a2
    else:
        root = sqrt(disc)
        t0 = (-b - root) / a2
        t1 = (-b + root) / a2
    return _build_hits(ray, rd, (t0, so), (t1, so))


def sphIntersect(ro, rd, center, radius: float) -> Tuple[RayHit, ...]:
    """Ray/sphere intersection from raw parameters.

    Parameters
    ----------
    ro, rd:
        Ray origin and direction ``(3,)``.  *rd* need not be unit length.
    center:
        Sphere centre ``(3,)``.
    radius:
        Sphere radius; its absolute value is used.

    Returns
    -------
    tuple of RayHit
        Zero, one or two hits, ordered by ascending ``t``.
    """
    return sphere_hits(Ray(ro, rd), center, radius)


# ===========================================================================
# Capsule
# ===========================================================================

def _cap_crossing(
    ro: _F, rd: _F, cap: _F, r: float, sign: float,
) -> Optional[_Crossing]:
    """Near (``sign=-1``) or far (``sign=+1``) root against one cap sphere."""
    oc = ro - cap
    b = float(rd @ oc)
    c = float(oc @ oc) - r * r
    disc = b * b - c
    _check_discriminant(disc, "capsule cap")
    if disc < 0.0:
        return None
    return -b + sign * sqrt(disc), cap


def capsule_hits(ray: Ray, a: _F, b: _F, radius: float) -> Tuple[RayHit, ...]:
    """All crossings of *ray* with the capsule ``a``–``b``, ordered by ``t``."""
    ro = ray.origin
    rd = ray.unit_direction
    pa = as_vec3(a)
    pb = as_vec3(b)
    r = abs(radius)

    ba = pb - pa
    oa = ro - pa

    baba = float(ba @ ba)
    bard = float(ba @ rd)
    baoa = float(ba @ oa)
    rdoa = float(rd @ oa)
    oaoa = float(oa @ oa)

    qa = baba - bard * bard
    qb = baba * rdoa - baoa * bard
    qc = baba * oaoa - baoa * baoa - r * r * baba
    disc = qb * qb - qa * qc

    _check_discriminant(disc, "capsule")

    if qa <= 0.0:
        # Ray runs along the axis (or the axis has no length): only the
        # caps can be crossed, and only from inside the cylinder wall.
        log.debug("capsule raycast parallel to axis (a=%g, c=%g)", qa, qc)
        if qc > 0.0:
            return ()
        first, last = (pa, pb) if bard >= 0.0 else (pb, pa)
        near = _cap_crossing(ro, rd, first, r, -1.0)
        far = _cap_crossing(ro, rd, last, r, 1.0)
    else:
        if disc < 0.0:
            return ()
        root = sqrt(disc)

        def _crossing(t: float, sign: float) -> Optional[_Crossing]:
            y = baoa + bard * t
            if 0.0 < y < baba:
                return t, pa + ba * (y / baba)
            return _cap_crossing(ro, rd, pa if y <= 0.0 else pb, r, sign)

        if disc == 0.0:
            t = -qb / qa
            near = _crossing(t, -1.0)
            far = _crossing(t, 1.0)
        else:
            near = _crossing((-qb - root) / qa, -1.0)
            far = _crossing((-qb + root) / qa, 1.0)

    if near is None or far is None:
        return ()
    return _build_hits(ray, rd, near, far)


def capIntersect(ro, rd, a, b, radius: float) -> Tuple[RayHit, ...]:
    """Ray/capsule intersection from raw parameters.

    Parameters
    ----------
    ro, rd:
        Ray origin and direction ``(3,)``.  *rd* need not be unit length.
    a, b:
        Capsule axis endpoints ``(3,)``.
    radius:
        Capsule radius; its absolute value is used.

    Returns
    -------
    tuple of RayHit
        Zero, one or two hits, ordered by ascending ``t``.
    """
    return capsule_hits(Ray(ro, rd), a, b, radius)
