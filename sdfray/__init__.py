"""
sdfray: exact distance and raycast queries for implicit shapes
===============================================================

Signed distance fields (SDFs) for the sphere and the capsule, with exact
analytic ray intersection that classifies every crossing as entering,
exiting or grazing the surface.

Implemented features
--------------------
- Primitive shapes: Sphere, Capsule
- Queries: signed distance (vectorised over point arrays), raycast
- Boolean operations: Union, Intersection, Subtraction, Xor
- Shape groups: mutable unions of any number of shapes

Quick start
-----------

::

    from sdfray import Sphere, Capsule, Ray, ShapeGroup, raycast

    sphere  = Sphere(radius=5.0)
    capsule = Capsule((0, -10, 0), (0, 10, 0), radius=5.0)

    sphere.distance((0.0, 0.0, -10.0))          # 5.0
    count, hits = raycast(capsule, Ray((0, 0, -10), (0, 0, 1)))
    [(h.kind.name, h.t) for h in hits]          # [('ENTER', 5.0), ('EXIT', 15.0)]

    group = ShapeGroup(sphere, capsule)
    group.distance((20.0, 0.0, 0.0))            # 15.0

Free functions taking raw parameters live in :mod:`sdfray.primitives`
(``sdSphere``, ``sdCapsule``, ``opUnion``, ...) and :mod:`sdfray.raycast`
(``sphIntersect``, ``capIntersect``).
"""

from .ray import HitKind, Ray, RayHit, ray_at
from .raycast import DiscriminantError, capIntersect, sphIntersect
from .geometry import (
    Geometry,
    HasDistance,
    Raycastable,
    Sphere,
    Capsule,
    Union,
    Intersection,
    Subtraction,
    Xor,
    ShapeGroup,
    distance,
    raycast,
)

__version__ = "0.1.0"

__all__ = [
    # Rays
    "Ray",
    "RayHit",
    "HitKind",
    "ray_at",

    # Base and capabilities
    "Geometry",
    "HasDistance",
    "Raycastable",

    # Primitives
    "Sphere",
    "Capsule",

    # Boolean operations
    "Union",
    "Intersection",
    "Subtraction",
    "Xor",
    "ShapeGroup",

    # Queries
    "distance",
    "raycast",
    "sphIntersect",
    "capIntersect",
    "DiscriminantError",
]
