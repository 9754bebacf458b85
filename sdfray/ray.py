"""Ray and ray-hit value types.

A :class:`Ray` is an origin plus a direction that callers need not
normalise; every raycast normalises the direction before solving, and the
parametric distance ``t`` stored in a :class:`RayHit` is measured along that
unit direction::

    hit.point == ray.origin + hit.t * normalize(ray.direction)

Example
-------
>>> from sdfray.ray import Ray, ray_at
>>> ray = Ray(origin=(0.0, 0.0, -10.0), direction=(0.0, 0.0, 2.0))
>>> ray_at(ray, 5.0)
array([ 0.,  0., -5.])
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

from ._common import _F, as_vec3, normalize

__all__ = ["HitKind", "Ray", "RayHit", "ray_at"]


class HitKind(enum.Enum):
    """How a ray crosses a surface."""

    ENTER = "enter"
    EXIT = "exit"
    TANGENT = "tangent"


@dataclass(frozen=True, eq=False)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray, as a float ``(3,)`` array.
        direction: The direction of the ray.  Not required to be unit
            length; use :attr:`unit_direction` for the normalised form.
    """

    origin: _F
    direction: _F

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vec3(self.origin))
        object.__setattr__(self, "direction", as_vec3(self.direction))

    @property
    def unit_direction(self) -> _F:
        """The direction scaled to unit length (NaN for a zero direction)."""
        return normalize(self.direction)

    def at(self, t: float) -> _F:
        """Point ``t`` units along the normalised direction."""
        return ray_at(self, t)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return bool(
            np.array_equal(self.origin, other.origin)
            and np.array_equal(self.direction, other.direction)
        )

    def __hash__(self) -> int:
        return hash((tuple(self.origin), tuple(self.direction)))

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"


@dataclass(frozen=True, eq=False)
class RayHit:
    """A classified ray/surface intersection.

    Attributes:
        kind: :class:`HitKind` of the crossing.
        ray: The ray that produced the hit, exactly as the caller passed it.
        t: Distance from ``ray.origin`` along the normalised direction.
            Non-negative for every reported hit.
        point: World-space point ``ray.origin + t * unit_direction``.
        normal: Unit surface normal at *point*, pointing out of the shape.
    """

    kind: HitKind
    ray: Ray
    t: float
    point: _F
    normal: _F

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RayHit):
            return NotImplemented
        return bool(
            self.kind is other.kind
            and self.ray == other.ray
            and self.t == other.t
            and np.array_equal(self.point, other.point)
            and np.array_equal(self.normal, other.normal)
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.ray, self.t, tuple(self.point), tuple(self.normal)))

    def __repr__(self) -> str:
        return (
            f"RayHit(kind={self.kind.name}, t={self.t!r}, "
            f"point={self.point.tolist()}, normal={self.normal.tolist()})"
        )


def ray_at(ray: Ray, t: float) -> _F:
    """Compute the point along *ray* at parameter *t*.

    Args:
        ray: The ray to evaluate.
        t: The parameter value, measured along the normalised direction.
            Negative values lie behind the origin.

    Returns:
        The point ``ray.origin + t * normalize(ray.direction)``.
    """
    return ray.origin + t * ray.unit_direction
