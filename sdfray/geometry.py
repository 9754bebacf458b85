"""Shape objects, boolean composition and shape groups for signed distance queries."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Protocol, Tuple, runtime_checkable

import numpy as np
import numpy.typing as npt

from . import primitives as sdf
from . import raycast as rc
from ._common import as_vec3
from .ray import Ray, RayHit

log = logging.getLogger("sdfray")

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------
_Array = npt.NDArray[np.floating]
_SDFFunc = Callable[[_Array], _Array]

_IDENTITY_ROTATION = (1.0, 0.0, 0.0, 0.0)


# ===========================================================================
# Capabilities
# ===========================================================================

@runtime_checkable
class HasDistance(Protocol):
    """Anything that can report a signed distance to its surface."""

    def distance(self, p: _Array) -> _Array: ...


@runtime_checkable
class Raycastable(Protocol):
    """Anything that can report every ray crossing of its surface."""

    def raycast(self, ray: Ray) -> Tuple[RayHit, ...]: ...


# ===========================================================================
# Base class
# ===========================================================================

class Geometry:
    """Base class for signed-distance-function geometries.

    A ``Geometry`` wraps a callable ``func(p) -> distances`` where *p* is
    a ``(..., 3)`` array of 3D points and the return value is a ``(...)``
    array of signed distances: negative inside, zero on the surface,
    positive outside.

    Every geometry also carries ``position``, ``rotation`` (a ``(w, x, y, z)``
    quaternion) and ``scale`` fields, describing where a host scene places
    the shape.  :class:`Sphere` is centred at ``position``; the other
    fields are not applied by the primitives.

    Implements:
    - Queries:            :meth:`distance` (alias :meth:`sdf`, ``__call__``)
    - Boolean operations: :meth:`union`, :meth:`subtract`, :meth:`intersect`,
      :meth:`xor`
    """

    def __init__(self, func: _SDFFunc) -> None:
        self._func = func
        self.position = np.zeros(3)
        self.rotation = np.array(_IDENTITY_ROTATION)
        self.scale = 1.0

    def distance(self, p: _Array) -> _Array:
        """Signed distance at *p* (shape ``(3,)`` or ``(..., 3)``)."""
        return self._func(np.asarray(p, dtype=float))

    def sdf(self, p: _Array) -> _Array:
        """Evaluate signed distance at *p* (shape ``(..., 3)``)."""
        return self.distance(p)

    def __call__(self, p: _Array) -> _Array:
        return self.distance(p)

    # ------------------------------------------------------------------
    # Boolean operations
    # ------------------------------------------------------------------

    def union(self, other: HasDistance) -> Geometry:
        """Return the union (min) of this shape and *other*."""
        return Geometry(lambda p: sdf.opUnion(self.distance(p), other.distance(p)))

    def subtract(self, other: HasDistance) -> Geometry:
        """Subtract *other* from this shape."""
        return Geometry(lambda p: sdf.opSubtraction(other.distance(p), self.distance(p)))

    def intersect(self, other: HasDistance) -> Geometry:
        """Return the intersection (max) of this shape and *other*."""
        return Geometry(lambda p: sdf.opIntersection(self.distance(p), other.distance(p)))

    def xor(self, other: HasDistance) -> Geometry:
        """Return the symmetric difference of this shape and *other*."""
        return Geometry(lambda p: sdf.opXor(self.distance(p), other.distance(p)))


# ===========================================================================
# Primitive shapes
# ===========================================================================

class Sphere(Geometry):
    """Sphere of *radius* centred at *origin*.

    The centre is the geometry's :attr:`position`; ``origin`` names the same
    array, so moving either moves the sphere.
    """

    def __init__(self, radius: float, origin=(0.0, 0.0, 0.0)) -> None:
        super().__init__(lambda p: sdf.sdSphere(p, self.position, self.radius))
        self.radius = float(radius)
        self.position = as_vec3(origin)

    @property
    def origin(self) -> _Array:
        return self.position

    @origin.setter
    def origin(self, value) -> None:
        self.position = as_vec3(value)

    def raycast(self, ray: Ray) -> Tuple[RayHit, ...]:
        """Every crossing of *ray* with the sphere surface, nearest first."""
        return rc.sphere_hits(ray, self.origin, self.radius)

    def raycast_from(self, origin, direction) -> Tuple[RayHit, ...]:
        """:meth:`raycast` for a ray given as an origin/direction pair."""
        return self.raycast(Ray(origin, direction))

    def __repr__(self) -> str:
        return f"Sphere(radius={self.radius!r}, origin={self.origin.tolist()})"


class Capsule(Geometry):
    """Line segment ``endpoint_a``–``endpoint_b`` swept by a ball of *radius*.

    Parameters
    ----------
    endpoint_a, endpoint_b:
        Axis endpoints ``(x, y, z)``; the hemispherical caps are centred here.
    radius:
        Radius of the swept ball.
    """

    def __init__(self, endpoint_a, endpoint_b, radius: float) -> None:
        self.endpoint_a = as_vec3(endpoint_a)
        self.endpoint_b = as_vec3(endpoint_b)
        self.radius = float(radius)
        super().__init__(
            lambda p: sdf.sdCapsule(p, self.endpoint_a, self.endpoint_b, self.radius)
        )

    def raycast(self, ray: Ray) -> Tuple[RayHit, ...]:
        """Every crossing of *ray* with the capsule surface, nearest first."""
        return rc.capsule_hits(ray, self.endpoint_a, self.endpoint_b, self.radius)

    def raycast_from(self, origin, direction) -> Tuple[RayHit, ...]:
        """:meth:`raycast` for a ray given as an origin/direction pair."""
        return self.raycast(Ray(origin, direction))

    def __repr__(self) -> str:
        return (
            f"Capsule(endpoint_a={self.endpoint_a.tolist()}, "
            f"endpoint_b={self.endpoint_b.tolist()}, radius={self.radius!r})"
        )


# ===========================================================================
# Boolean operation classes
# ===========================================================================

class Union(Geometry):
    """Union of two or more geometries (minimum SDF)."""

    def __init__(self, *geoms: HasDistance) -> None:
        def _sdf(p: _Array) -> _Array:
            d = geoms[0].distance(p)
            for g in geoms[1:]:
                d = sdf.opUnion(d, g.distance(p))
            return d

        super().__init__(_sdf)


class Intersection(Geometry):
    """Intersection of two or more geometries (maximum SDF)."""

    def __init__(self, *geoms: HasDistance) -> None:
        def _sdf(p: _Array) -> _Array:
            d = geoms[0].distance(p)
            for g in geoms[1:]:
                d = sdf.opIntersection(d, g.distance(p))
            return d

        super().__init__(_sdf)


class Subtraction(Geometry):
    """Subtract *cutter* from *base*."""

    def __init__(self, base: HasDistance, cutter: HasDistance) -> None:
        super().__init__(
            lambda p: sdf.opSubtraction(cutter.distance(p), base.distance(p))
        )


class Xor(Geometry):
    """Symmetric difference of *first* and *second*."""

    def __init__(self, first: HasDistance, second: HasDistance) -> None:
        super().__init__(
            lambda p: sdf.opXor(first.distance(p), second.distance(p))
        )


# ===========================================================================
# Shape group
# ===========================================================================

class ShapeGroup(Geometry):
    """Mutable union of any number of shapes.

    The group references its members without owning them; a shape may sit
    in several groups and is still the caller's to modify.  Adding or
    removing members while another thread queries the group is not safe,
    so callers sharing a group across threads must lock around mutation.

    The distance of an empty group is NaN.
    """

    def __init__(self, *shapes: HasDistance) -> None:
        self._shapes: list = list(shapes)
        super().__init__(self._min_distance)

    def _min_distance(self, p: _Array) -> _Array:
        if not self._shapes:
            return np.full(p.shape[:-1], np.nan)[()]
        d = self._shapes[0].distance(p)
        for shape in self._shapes[1:]:
            d = sdf.opUnion(d, shape.distance(p))
        return d

    def add(self, shape: HasDistance) -> None:
        """Append *shape* to the group."""
        self._shapes.append(shape)
        log.debug("added %r to group (%d members)", shape, len(self._shapes))

    def remove(self, shape: HasDistance) -> bool:
        """Remove the first occurrence of *shape*; ``True`` if it was present."""
        for i, member in enumerate(self._shapes):
            if member is shape:
                del self._shapes[i]
                log.debug("removed %r from group (%d members)", shape, len(self._shapes))
                return True
        return False

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self) -> Iterator[HasDistance]:
        return iter(list(self._shapes))

    def __contains__(self, shape: object) -> bool:
        return any(member is shape for member in self._shapes)

    # ------------------------------------------------------------------
    # Combined with another shape at a point (this group is d1)
    # ------------------------------------------------------------------

    def union_distance(self, other: HasDistance, p: _Array) -> _Array:
        return sdf.opUnion(self.distance(p), other.distance(p))

    def subtraction_distance(self, other: HasDistance, p: _Array) -> _Array:
        return sdf.opSubtraction(self.distance(p), other.distance(p))

    def intersection_distance(self, other: HasDistance, p: _Array) -> _Array:
        return sdf.opIntersection(self.distance(p), other.distance(p))

    def xor_distance(self, other: HasDistance, p: _Array) -> _Array:
        return sdf.opXor(self.distance(p), other.distance(p))


# ===========================================================================
# Shape-agnostic entry points
# ===========================================================================

def distance(shape: HasDistance, point: _Array) -> _Array:
    """Signed distance from *point* to *shape*."""
    return shape.distance(point)


def raycast(shape: Raycastable, ray: Ray) -> Tuple[int, Tuple[RayHit, ...]]:
    """Cast *ray* at *shape*.

    Returns
    -------
    (count, hits)
        *count* always equals ``len(hits)``; *hits* is ordered by ascending
        ``t``.

    Raises
    ------
    TypeError
        If *shape* cannot be raycast.
    """
    if not isinstance(shape, Raycastable):
        raise TypeError(f"{type(shape).__name__} does not support raycasting")
    hits = shape.raycast(ray)
    return len(hits), hits
