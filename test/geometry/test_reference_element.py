import numpy as np
import pytest

from surfmesh.geometry import (
    GeometryType, VERTEX, LINE, TRIANGLE, local_edge,
    reference_element, geometry, AffineGeometry
)

from geometry_data import *


class TestReferenceElementInterfaces:
    def test_triangle(self):
        ref = reference_element(TRIANGLE)
        assert ref.size(0) == 1
        assert ref.size(1) == 3
        assert ref.size(2) == 3
        assert ref.size(0, 0, 1) == 3
        assert ref.size(1, 2, 2) == 2
        for i in range(3):
            assert ref.sub_entity(i, 1, 0, 2) == local_edge[i, 0]
            assert ref.sub_entity(i, 1, 1, 2) == local_edge[i, 1]
            assert ref.type(i, 1) == LINE
        np.testing.assert_allclose(ref.corners(), [[0, 0], [1, 0], [0, 1]])
        np.testing.assert_allclose(ref.position(0, 1), [0.5, 0.5])
        np.testing.assert_allclose(ref.position(0, 0), [1/3, 1/3])
        np.testing.assert_allclose(ref.position(2, 2), [0, 1])

        with pytest.raises(IndexError):
            ref.sub_entity(3, 1, 0, 2)
        with pytest.raises(IndexError):
            ref.sub_entity(0, 1, 2, 2)
        with pytest.raises(ValueError):
            ref.size(3)

    def test_line_and_vertex(self):
        ref = reference_element(LINE)
        assert ref.size(1) == 2
        np.testing.assert_allclose(ref.position(0, 0), [0.5])
        assert reference_element(VERTEX).size(0) == 1
        with pytest.raises(ValueError):
            reference_element(GeometryType(3))

    def test_geometry_type(self):
        assert TRIANGLE == GeometryType(2)
        assert TRIANGLE.is_triangle()
        assert LINE.is_line()
        assert VERTEX.is_vertex()
        assert str(TRIANGLE) == 'triangle'
        assert not GeometryType(2, 'cube').is_simplex()


class TestAffineGeometryInterfaces:
    @pytest.mark.parametrize("data", affine_geometry_data)
    def test_affine_geometry(self, data):
        g = geometry(data['type'], data['corners'])
        assert isinstance(g, AffineGeometry)
        assert g.affine()
        assert g.type() == data['type']
        assert g.corners() == data['corners'].shape[0]
        np.testing.assert_allclose(g.volume(), data['volume'])
        np.testing.assert_allclose(g.integration_element(), data['integration_element'])
        np.testing.assert_allclose(g.center(), data['center'])
        np.testing.assert_allclose(g.global_(data['local']), data['global'])
        np.testing.assert_allclose(g.local(data['global']), data['local'], atol=1e-14)

        jt = g.jacobian_transposed()
        jit = g.jacobian_inverse_transposed()
        np.testing.assert_allclose(jt @ jit, np.eye(jt.shape[0]), atol=1e-14)

        with pytest.raises(IndexError):
            g.corner(g.corners())

    def test_wrong_corners(self):
        with pytest.raises(ValueError):
            AffineGeometry(TRIANGLE, np.zeros((2, 3)))


if __name__ == "__main__":
    pytest.main(["./test_reference_element.py"])
