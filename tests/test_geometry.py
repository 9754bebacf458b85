"""Tests for sdfray geometry classes, boolean composition and shape groups."""

import logging

import numpy as np
import numpy.testing as npt
import pytest

from sdfray import (
    Capsule,
    Geometry,
    HasDistance,
    Intersection,
    Ray,
    Raycastable,
    ShapeGroup,
    Sphere,
    Subtraction,
    Union,
    Xor,
    distance,
    raycast,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _p(*xyz) -> np.ndarray:
    return np.array([list(xyz)], dtype=float)


def _grid(n: int = 8) -> np.ndarray:
    lin = np.linspace(-20.0, 20.0, n)
    Z, Y, X = np.meshgrid(lin, lin, lin, indexing="ij")
    return np.stack([X, Y, Z], axis=-1)


class _Plane:
    """Half-space ``z <= h``; has a distance but cannot be raycast."""

    def __init__(self, h: float) -> None:
        self.h = h

    def distance(self, p):
        return np.asarray(p, dtype=float)[..., 2] - self.h


# ===========================================================================
# Base class
# ===========================================================================

class TestGeometry:
    def test_wraps_callable(self):
        g = Geometry(lambda p: p[..., 0])
        npt.assert_allclose(g.distance(_p(2, 0, 0)), [2.0])

    def test_sdf_and_call_alias_distance(self):
        s = Sphere(5.0)
        p = _grid(4)
        npt.assert_allclose(s.sdf(p), s.distance(p))
        npt.assert_allclose(s(p), s.distance(p))

    def test_accepts_plain_sequences(self):
        assert Sphere(5.0).distance([0, 0, -10]) == 5.0

    def test_transform_fields_default_to_identity(self):
        s = Sphere(5.0)
        npt.assert_allclose(s.position, [0.0, 0.0, 0.0])
        npt.assert_allclose(s.rotation, [1.0, 0.0, 0.0, 0.0])
        assert s.scale == 1.0

    def test_rotation_and_scale_are_not_applied(self):
        s = Sphere(5.0)
        s.rotation = np.array([0.0, 1.0, 0.0, 0.0])
        s.scale = 3.0
        assert s.distance((0.0, 0.0, -10.0)) == 5.0

    def test_capsule_is_placed_by_endpoints(self):
        c = Capsule((0.0, -10.0, 0.0), (0.0, 10.0, 0.0), 5.0)
        c.position = np.array([100.0, 0.0, 0.0])
        assert c.distance((0.0, 0.0, -10.0)) == 5.0

    def test_capabilities(self):
        assert isinstance(Sphere(1.0), Raycastable)
        assert isinstance(Capsule((0, 0, 0), (0, 1, 0), 1.0), Raycastable)
        assert not isinstance(ShapeGroup(), Raycastable)
        assert isinstance(ShapeGroup(), HasDistance)
        assert isinstance(_Plane(0.0), HasDistance)


# ===========================================================================
# Primitive shapes
# ===========================================================================

class TestSphere:
    def test_inside_outside_surface(self):
        s = Sphere(5.0)
        assert s.distance((0, 0, 0)) == -5.0
        assert s.distance((0, 0, -10)) == 5.0
        assert s.distance((0, 5, 0)) == 0.0

    def test_origin_is_centre(self):
        s = Sphere(2.0, origin=(1.0, 1.0, 1.0))
        assert s.distance((1.0, 1.0, 1.0)) == -2.0
        npt.assert_allclose(s.distance(_p(1, 1, 4)), [1.0])

    def test_origin_is_position(self):
        s = Sphere(2.0, origin=(1.0, 2.0, 3.0))
        npt.assert_allclose(s.position, [1.0, 2.0, 3.0])
        assert s.origin is s.position

    def test_moving_position_moves_sphere(self):
        s = Sphere(5.0)
        s.position = np.array([0.0, 0.0, -10.0])
        assert s.distance((0.0, 0.0, -10.0)) == -5.0
        npt.assert_allclose(s.origin, [0.0, 0.0, -10.0])
        hits = s.raycast(Ray((0.0, 0.0, -30.0), (0.0, 0.0, 1.0)))
        assert [h.t for h in hits] == pytest.approx([15.0, 25.0])

    def test_assigning_origin_moves_sphere(self):
        s = Sphere(5.0)
        s.origin = (10.0, 0.0, 0.0)
        npt.assert_allclose(s.position, [10.0, 0.0, 0.0])
        assert s.distance((10.0, 0.0, 0.0)) == -5.0

    def test_assigning_bad_origin_raises(self):
        with pytest.raises(ValueError):
            Sphere(5.0).origin = (1.0, 2.0)

    def test_batch_shape(self):
        assert Sphere(5.0).distance(_grid(4)).shape == (4, 4, 4)

    def test_repr(self):
        assert "radius=5.0" in repr(Sphere(5.0))


class TestCapsule:
    def setup_method(self):
        self.capsule = Capsule((0.0, -10.0, 0.0), (0.0, 10.0, 0.0), 5.0)

    def test_inside_outside_surface(self):
        assert self.capsule.distance((0, 0, 0)) == -5.0
        assert self.capsule.distance((0, 0, -10)) == 5.0
        assert self.capsule.distance((0, 15, 0)) == 0.0

    def test_batch_signs(self):
        phi = self.capsule.distance(_grid(5))
        assert phi.shape == (5, 5, 5)
        assert phi[2, 2, 2] < 0
        assert phi[0, 0, 0] > 0

    def test_repr(self):
        assert "Capsule(" in repr(self.capsule)


# ===========================================================================
# Boolean operations
# ===========================================================================

class TestBooleans:
    def setup_method(self):
        self.a = Sphere(5.0)
        self.b = Sphere(5.0, origin=(6.0, 0.0, 0.0))
        self.p = _grid(6)

    def test_union_method_and_class_agree(self):
        expected = np.minimum(self.a.distance(self.p), self.b.distance(self.p))
        npt.assert_allclose(self.a.union(self.b).distance(self.p), expected)
        npt.assert_allclose(Union(self.a, self.b).distance(self.p), expected)

    def test_intersection_method_and_class_agree(self):
        expected = np.maximum(self.a.distance(self.p), self.b.distance(self.p))
        npt.assert_allclose(self.a.intersect(self.b).distance(self.p), expected)
        npt.assert_allclose(Intersection(self.a, self.b).distance(self.p), expected)

    def test_subtraction_method_and_class_agree(self):
        # base.subtract(cutter) == max(-cutter, base)
        expected = np.maximum(-self.b.distance(self.p), self.a.distance(self.p))
        npt.assert_allclose(self.a.subtract(self.b).distance(self.p), expected)
        npt.assert_allclose(Subtraction(self.a, self.b).distance(self.p), expected)

    def test_xor_method_and_class_agree(self):
        da, db = self.a.distance(self.p), self.b.distance(self.p)
        expected = np.maximum(np.minimum(da, db), -np.maximum(da, db))
        npt.assert_allclose(self.a.xor(self.b).distance(self.p), expected)
        npt.assert_allclose(Xor(self.a, self.b).distance(self.p), expected)

    def test_union_with_self_is_self(self):
        npt.assert_allclose(self.a.union(self.a).distance(self.p), self.a.distance(self.p))

    def test_subtract_self_at_exterior_point(self):
        p = (0.0, 0.0, -10.0)
        assert self.a.subtract(self.a).distance(p) == self.a.distance(p)

    def test_subtraction_carves_hole(self):
        cut = self.a.subtract(self.b)
        assert cut.distance((-3.0, 0.0, 0.0)) < 0   # only in a
        assert cut.distance((3.0, 0.0, 0.0)) > 0    # in both -> removed

    def test_xor_signs(self):
        x = self.a.xor(self.b)
        assert x.distance((-3.0, 0.0, 0.0)) < 0     # only in a
        assert x.distance((9.0, 0.0, 0.0)) < 0      # only in b
        assert x.distance((3.0, 0.0, 0.0)) > 0      # in both

    def test_union_of_many(self):
        c = Capsule((0.0, -10.0, 0.0), (0.0, 10.0, 0.0), 1.0)
        u = Union(self.a, self.b, c)
        assert u.distance((0.0, 10.0, 0.0)) == -1.0

    def test_nested_composition(self):
        shape = self.a.union(self.b).subtract(Sphere(1.0, origin=(3.0, 0.0, 0.0)))
        assert shape.distance((3.0, 0.0, 0.0)) == pytest.approx(1.0)
        assert shape.distance((0.0, 0.0, 0.0)) < 0

    def test_composes_foreign_distance_objects(self):
        cut = self.a.intersect(_Plane(0.0))
        assert cut.distance((0.0, 0.0, -1.0)) < 0
        assert cut.distance((0.0, 0.0, 1.0)) > 0


# ===========================================================================
# Shape group
# ===========================================================================

class TestShapeGroup:
    def setup_method(self):
        self.sphere = Sphere(5.0)
        self.capsule = Capsule((20.0, -10.0, 0.0), (20.0, 10.0, 0.0), 5.0)

    def test_empty_group_is_nan(self):
        g = ShapeGroup()
        assert np.isnan(g.distance((0.0, 0.0, 0.0)))

    def test_empty_group_batch_is_nan(self):
        phi = ShapeGroup().distance(_grid(3))
        assert phi.shape == (3, 3, 3)
        assert np.all(np.isnan(phi))

    def test_distance_is_minimum(self):
        g = ShapeGroup(self.sphere, self.capsule)
        assert g.distance((0.0, 0.0, 0.0)) == -5.0
        assert g.distance((20.0, 0.0, 0.0)) == -5.0
        assert g.distance((10.0, 0.0, 0.0)) == 5.0

    def test_batch_matches_union(self):
        g = ShapeGroup(self.sphere, self.capsule)
        p = _grid(5)
        npt.assert_allclose(g.distance(p), Union(self.sphere, self.capsule).distance(p))

    def test_single_member(self):
        g = ShapeGroup(self.sphere)
        assert g.distance((0.0, 0.0, -10.0)) == self.sphere.distance((0.0, 0.0, -10.0))

    def test_add(self):
        g = ShapeGroup(self.sphere)
        g.add(self.capsule)
        assert len(g) == 2
        assert self.capsule in g
        assert g.distance((20.0, 0.0, 0.0)) == -5.0

    def test_remove_present(self):
        g = ShapeGroup(self.sphere, self.capsule)
        assert g.remove(self.capsule) is True
        assert len(g) == 1
        assert self.capsule not in g
        assert g.distance((20.0, 0.0, 0.0)) == 15.0

    def test_remove_absent(self):
        g = ShapeGroup(self.sphere)
        assert g.remove(self.capsule) is False
        assert len(g) == 1

    def test_remove_uses_identity(self):
        twin = Sphere(5.0)
        g = ShapeGroup(self.sphere)
        assert g.remove(twin) is False

    def test_remove_only_first_occurrence(self):
        g = ShapeGroup(self.sphere, self.sphere)
        assert g.remove(self.sphere) is True
        assert len(g) == 1
        assert self.sphere in g

    def test_members_are_shared(self):
        g = ShapeGroup(self.sphere)
        self.sphere.radius = 7.0
        assert g.distance((0.0, 0.0, 0.0)) == -7.0

    def test_iter(self):
        g = ShapeGroup(self.sphere, self.capsule)
        assert list(g) == [self.sphere, self.capsule]

    def test_nested_groups(self):
        inner = ShapeGroup(self.capsule)
        outer = ShapeGroup(self.sphere, inner)
        assert outer.distance((20.0, 0.0, 0.0)) == -5.0

    def test_combined_distances(self):
        g = ShapeGroup(self.sphere)
        other = Sphere(5.0, origin=(6.0, 0.0, 0.0))
        p = (3.0, 0.0, 0.0)
        d1, d2 = g.distance(p), other.distance(p)
        assert g.union_distance(other, p) == min(d1, d2)
        assert g.subtraction_distance(other, p) == max(-d1, d2)
        assert g.intersection_distance(other, p) == max(d1, d2)
        assert g.xor_distance(other, p) == max(min(d1, d2), -max(d1, d2))

    def test_mutation_is_logged(self, caplog):
        g = ShapeGroup()
        with caplog.at_level(logging.DEBUG, logger="sdfray"):
            g.add(self.sphere)
            g.remove(self.sphere)
        messages = [r.getMessage() for r in caplog.records]
        assert any("added" in m for m in messages)
        assert any("removed" in m for m in messages)


# ===========================================================================
# Shape-agnostic entry points
# ===========================================================================

class TestEntryPoints:
    def test_distance(self):
        assert distance(Sphere(5.0), (0.0, 0.0, -10.0)) == 5.0
        assert distance(ShapeGroup(Sphere(5.0)), (0.0, 0.0, 0.0)) == -5.0

    def test_raycast_count_matches_hits(self):
        ray = Ray((0.0, 0.0, -10.0), (0.0, 0.0, 1.0))
        for shape in (Sphere(5.0), Capsule((0.0, -10.0, 0.0), (0.0, 10.0, 0.0), 5.0)):
            count, hits = raycast(shape, ray)
            assert count == 2
            assert count == len(hits)

    def test_raycast_miss(self):
        count, hits = raycast(Sphere(5.0), Ray((-10.0, 0.0, -10.0), (0.0, 0.0, 1.0)))
        assert count == 0
        assert hits == ()

    def test_raycast_rejects_non_raycastable(self):
        with pytest.raises(TypeError):
            raycast(ShapeGroup(Sphere(5.0)), Ray((0, 0, -10), (0, 0, 1)))
