import numpy as np
import pytest

from surfmesh.geometry import TRIANGLE, LINE, VERTEX
from surfmesh.mesh import SurfaceMesh, PartitionType, MarkState
from surfmesh.mesh import Vertex, Edge, Element

from surface_mesh_data import *


def refine_first(data):
    mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
    assert mesh.mark(1, mesh.entity(0, 0))
    mesh.pre_adapt()
    mesh.adapt()
    return mesh


def check_links(mesh):
    store = mesh.store
    for c in range(mesh.number_of_cells()):
        for i, e in enumerate(store.cell2edge[c]):
            assert c in store.edge2cell[e]
            # edge i of a cell is opposite to its corner i
            assert set(store.edge[e]) == set(store.cell[c, [(i+1) % 3, (i+2) % 3]])
    for e in range(mesh.number_of_edges()):
        incident = store.edge2cell[e]
        if store.boundary_id[e] < 0:
            assert len(incident) >= 2
        else:
            assert len(incident) == 1
        for c in incident:
            assert any(store.is_ancestor_edge(ce, e) for ce in store.cell2edge[c])


class TestSurfaceMeshInterfaces:
    @pytest.mark.parametrize("data", init_data)
    def test_level_index_set(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
        iset = mesh.level_index_set(0)

        for codim, N in zip((0, 1, 2), (data['NC'], data['NE'], data['NN'])):
            assert iset.size(codim) == N
            idx = sorted(iset.index(e) for e in mesh.level_entities(codim, 0))
            np.testing.assert_array_equal(idx, np.arange(N))

        assert iset.geom_types(0) == [TRIANGLE]
        assert iset.geom_types('edge') == [LINE]
        assert iset.geom_types('node') == [VERTEX]
        assert iset.size_of_type(TRIANGLE) == data['NC']
        assert iset.size_of_type(LINE) == data['NE']

        # recomputing without structural change gives the same indices
        before = np.array(mesh.store._level_index[1])
        iset.update()
        np.testing.assert_array_equal(np.asarray(mesh.store._level_index[1]), before)

    @pytest.mark.parametrize("data", init_data)
    def test_sub_index(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
        iset = mesh.level_index_set(0)
        for e in mesh.level_entities('cell', 0):
            for i in range(3):
                assert e.sub_level_index(i, 'node') == iset.index(e.sub_entity(i, 2))
                assert e.sub_leaf_index(i, 1) == e.sub_entity(i, 1).leaf_index()
                assert e.sub_id(i, 'edge') == e.sub_entity(i, 1).id()
            assert e.sub_level_index(0, 0) == e.level_index()
            with pytest.raises(IndexError):
                e.sub_entity(3, 'node')
            with pytest.raises(ValueError):
                e.sub_entity(0, 3)

    @pytest.mark.parametrize("data", init_data)
    def test_entity_views(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])

        e = mesh.entity('cell', 0)
        assert isinstance(e, Element)
        assert e == mesh.level_entities(0, 0)[0]
        assert len({e, mesh.entity(0, 0)}) == 1
        assert e.level() == 0
        assert e.partition_type() == PartitionType.INTERIOR
        assert e.type() == TRIANGLE
        assert e.corners() == 3
        assert e.count(1) == 3
        assert e.count('node') == 3
        assert e.is_leaf()
        assert not e.has_father()
        assert e.father() is None
        assert not e.is_new()
        assert not e.might_vanish()
        np.testing.assert_allclose(e.corner(1), data['node'][data['cell'][0, 1]])
        assert e.geometry() is e.geometry()

        edge = e.sub_entity(0, 'edge')
        assert isinstance(edge, Edge)
        assert edge.type() == LINE
        assert edge.count(2) == 2
        assert edge.mark_state() == MarkState.DO_NOTHING
        assert edge.children() == []
        assert e in edge.elements()
        with pytest.raises(ValueError):
            edge.count(0)

        v = e.sub_entity(2, 'node')
        assert isinstance(v, Vertex)
        assert v.type() == VERTEX
        assert v.son() is None
        np.testing.assert_allclose(v.position(), v.geometry().center())

        with pytest.raises(IndexError):
            mesh.entity(0, data["NC"])

    def test_geometry_in_father_without_father(self):
        mesh = SurfaceMesh.from_one_triangle()
        with pytest.raises(RuntimeError):
            mesh.entity(0, 0).geometry_in_father()

    @pytest.mark.parametrize("data", init_data + hybrid_data)
    def test_ids(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
        ids = mesh.global_id_set()
        before = [ids.id(e) for e in mesh.level_entities(1, 0)]
        assert len(set(before)) == len(before)

        mesh.global_refine(1)
        after = [ids.id(e) for e in mesh.level_entities(1, 0)]
        assert before == after

        for codim in range(3):
            all_ids = [mesh.local_id_set().id(mesh.entity(codim, h))
                       for h in range(mesh.store.count(codim))]
            assert len(set(all_ids)) == len(all_ids)

        e = mesh.entity(0, 0)
        assert ids.sub_id(e, 1, 2) == mesh.entity(2, mesh.store.cell[0, 1]).id()

    @pytest.mark.parametrize("data", refine_one_data)
    def test_refine_one(self, data):
        mesh = refine_first(data)
        store = mesh.store

        assert mesh.number_of_nodes() == data["NN"]
        assert mesh.number_of_edges() == data["NE"]
        assert mesh.number_of_cells() == data["NC"]
        assert mesh.max_level() == data["max_level"]

        e = mesh.entity(0, 0)
        assert not e.is_leaf()
        assert [c.handle for c in e.children()] == data['children']
        for c in e.children():
            assert c.father() == e
            assert c.level() == 1
            assert c.is_new()

        np.testing.assert_array_equal(np.asarray(store.cell)[2:], data['child_cell'])
        np.testing.assert_array_equal(np.asarray(store.cell2edge)[2:], data['child_cell2edge'])
        np.testing.assert_array_equal(np.asarray(store.node_son), data['node_son'])
        np.testing.assert_array_equal(np.asarray(store.edge_child)[:3], data['edge_child'])
        np.testing.assert_array_equal(np.asarray(store.boundary_id), data['boundary_id'])
        assert store.edge2cell == data['edge2cell']
        check_links(mesh)

        np.testing.assert_array_equal(mesh.level_cell(1), data['level_cell'])
        np.testing.assert_allclose(mesh.leaf_node(), data['leaf_node'])
        np.testing.assert_array_equal(mesh.leaf_cell(), data['leaf_cell'])
        assert tuple(mesh.size(c) for c in range(3)) == data['leaf_size']

        local = e.children()[0].geometry_in_father()
        np.testing.assert_allclose(np.array([local.corner(i) for i in range(3)]),
                                   data['geometry_in_father'])

        mesh.post_adapt()
        assert not any(c.is_new() for c in e.children())

    @pytest.mark.parametrize("data", refine_one_data)
    def test_leaf_index_set(self, data):
        mesh = refine_first(data)
        iset = mesh.leaf_index_set()

        for codim in range(3):
            leaves = mesh.leaf_entities(codim)
            idx = [iset.index(e) for e in leaves]
            np.testing.assert_array_equal(idx, np.arange(iset.size(codim)))

        # a vertex copied to the finer level shares the index of its copy
        for v in mesh.level_entities('node', 0):
            if v.son() is not None:
                assert v.leaf_index() == v.son().leaf_index()
                assert iset.contains(v)

        e = mesh.entity(0, 0)
        assert not iset.contains(e)
        with pytest.raises(ValueError):
            iset.index(e)
        with pytest.raises(ValueError):
            mesh.entity(1, 0).leaf_index()

    @pytest.mark.parametrize("data", init_data)
    def test_stale_index_set(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
        iset = mesh.leaf_index_set()
        lset = mesh.level_index_set(0)
        mesh.refine_element(mesh.entity(0, 0))

        assert not iset.is_valid()
        with pytest.raises(RuntimeError):
            iset.size(0)
        with pytest.raises(RuntimeError):
            lset.index(mesh.entity(0, 0))

        assert mesh.leaf_index_set() is iset
        assert iset.is_valid()
        assert iset.size(0) == data['NC'] + 3

    def test_refine_errors(self):
        mesh = SurfaceMesh.from_one_triangle()
        e = mesh.entity(0, 0)
        mesh.refine_element(e)
        with pytest.raises(ValueError):
            mesh.refine_element(e)
        with pytest.raises(ValueError):
            mesh.level_index_set(2)
        with pytest.raises(ValueError):
            mesh.level_entities(0, 5)
        with pytest.raises(ValueError):
            mesh.size(3)
        with pytest.raises(KeyError):
            mesh.size('face2')

    def test_mark(self):
        mesh = SurfaceMesh.from_box(nx=1, ny=1)
        e = mesh.entity(0, 0)

        assert not mesh.mark(-1, e)
        assert mesh.get_mark(e) == 0
        assert mesh.mark(2, e)
        assert mesh.get_mark(e) == 2
        assert not mesh.pre_adapt()

        assert mesh.adapt()
        assert mesh.max_level() == 2
        assert not mesh.mark(1, e)
        assert mesh.size(0) == 17
        mesh.post_adapt()
        assert not mesh.adapt()

        mesh = SurfaceMesh.from_box(nx=1, ny=1)
        mesh.mark(3, 1)
        options = mesh.adaptive_options(maxlevel=1)
        assert mesh.adapt(options)
        assert mesh.max_level() == 1

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_global_refine(self, n):
        mesh = SurfaceMesh.from_box(nx=2, ny=2)
        NC = mesh.number_of_cells()
        mesh.global_refine(n)

        assert mesh.max_level() == n
        assert mesh.size(0) == NC*4**n
        assert mesh.size(0, n) == NC*4**n
        check_links(mesh)
        # Euler characteristic of a disk
        assert mesh.size(2) - mesh.size(1) + mesh.size(0) == 1
        for level in range(n + 1):
            assert mesh.size(2, level) - mesh.size(1, level) + mesh.size(0, level) == 1

        node = mesh.leaf_node()
        cell = mesh.leaf_cell()
        assert node.shape == (mesh.size(2), 2)
        assert cell.shape == (mesh.size(0), 3)
        v0, v1, v2 = node[cell[:, 0]], node[cell[:, 1]], node[cell[:, 2]]
        a, b = v1 - v0, v2 - v0
        area = 0.5*(a[:, 0]*b[:, 1] - a[:, 1]*b[:, 0])
        np.testing.assert_allclose(np.sum(area), 1.0)
        assert np.all(area > 0)

    @pytest.mark.parametrize("data", init_data)
    def test_cell_to_cell(self, data):
        mesh = SurfaceMesh.from_arrays(data['node'], data['cell'])
        c2c = mesh.cell_to_cell(level=0)
        assert c2c.shape == (data['NC'], data['NC'])
        assert (c2c != c2c.T).nnz == 0

        mesh.global_refine(1)
        c2c = mesh.cell_to_cell()
        NC = mesh.size(0)
        assert c2c.shape == (NC, NC)
        assert (c2c != c2c.T).nnz == 0

    def test_distributed(self):
        mesh = SurfaceMesh.from_one_triangle()
        with pytest.raises(NotImplementedError):
            mesh.overlap_size(0)
        with pytest.raises(NotImplementedError):
            mesh.ghost_size(0)
        with pytest.raises(NotImplementedError):
            mesh.communicate()
        with pytest.raises(NotImplementedError):
            mesh.load_balance()


if __name__ == "__main__":
    pytest.main(["./test_surface_mesh.py", "-k", "test_refine_one"])
