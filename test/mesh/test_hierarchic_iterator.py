import pytest

from surfmesh.mesh import SurfaceMesh, HierarchicIterator

from surface_mesh_data import *


class TestHierarchicIteratorInterfaces:
    def test_descendants(self):
        mesh = SurfaceMesh.from_arrays(two_triangle_node, two_triangle_cell)
        mesh.refine_element(0)
        mesh.refine_element(5)
        e = mesh.entity(0, 0)

        # children are visited in reverse order, each followed by its subtree
        result = [c.handle for c in e.hierarchic(2)]
        assert result == [5, 9, 8, 7, 6, 4, 3, 2]

        result = [c.handle for c in e.hierarchic(1)]
        assert result == [5, 4, 3, 2]
        assert [c.level() for c in e.hierarchic(2)] == [1, 2, 2, 2, 2, 1, 1, 1]

        assert list(e.hierarchic(0)) == []
        assert list(mesh.entity(0, 1).hierarchic(5)) == []

    def test_positions(self):
        mesh = SurfaceMesh.from_one_triangle()
        mesh.global_refine(1)
        it = mesh.hierarchic(0, 1)
        end = mesh.hierarchic(0, 1, end=True)
        assert isinstance(it, HierarchicIterator)

        assert it != end
        assert it.current() == 4
        assert it.dereference() == mesh.entity(0, 4)
        for k in range(4):
            it.increment()
        assert it == end
        assert it.at_end()
        assert it.current() == -1
        with pytest.raises(RuntimeError):
            it.dereference()
        # incrementing the end does nothing
        it.increment()
        assert it == end


if __name__ == "__main__":
    pytest.main(["./test_hierarchic_iterator.py"])
