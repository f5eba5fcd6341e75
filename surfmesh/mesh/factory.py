from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .. import logger
from ..typing import TensorLike, Handle
from ..geometry import GeometryType, TRIANGLE, reference_element
from .entity_store import EntityStore
from .surface_mesh import SurfaceMesh


class SurfaceMeshFactory():
    """Build a level-0 `SurfaceMesh` from vertices and triangles.

    Parameters:
        GD (int): dimension of the ambient space, GD >= 2.
        itype, ftype: integer and float dtypes of the mesh arrays.

    Example:
        >>> factory = SurfaceMeshFactory(3)
        >>> for p in node:
        ...     factory.insert_vertex(p)
        >>> factory.insert_element(TRIANGLE, [0, 1, 2])
        >>> mesh = factory.create_mesh()

    A factory builds exactly one mesh.
    """
    def __init__(self, GD: int=3, *, itype=np.int32, ftype=np.float64) -> None:
        self.GD = GD
        self.itype = itype
        self.ftype = ftype
        self._store: Optional[EntityStore] = EntityStore(GD, itype=itype, ftype=ftype)
        self._cells: List[Tuple[int, int, int]] = []

    def insert_vertex(self, pos: TensorLike) -> Handle:
        """Insert a vertex and return its number, starting from 0."""
        if self._store is None:
            raise RuntimeError("The mesh has already been created.")
        return self._store.add_node(pos)

    def insert_element(self, gtype: GeometryType, vertices: Sequence[int]) -> None:
        """Insert a triangle given by the numbers of its 3 corners."""
        if self._store is None:
            raise RuntimeError("The mesh has already been created.")
        if gtype != TRIANGLE:
            raise ValueError(f"SurfaceMesh only supports triangles, got {gtype}.")
        if len(vertices) != 3:
            raise ValueError(f"A triangle has 3 corners, got {len(vertices)}.")
        NN = self._store.number_of_nodes()
        for v in vertices:
            if v < 0 or v >= NN:
                raise IndexError(f"Corner {v} does not exist, {NN} vertices "
                                 f"have been inserted.")
        self._cells.append(tuple(int(v) for v in vertices))

    def create_mesh(self) -> Optional[SurfaceMesh]:
        """Finish the construction, return None if the mesh was already
        created by this factory."""
        if self._store is None:
            logger.warning("create_mesh() has already been called on this "
                           "factory, no new mesh is returned.")
            return None

        store = self._store
        ref = reference_element(TRIANGLE)

        # edges are created the first time one of their vertex pairs is seen
        edge_map: Dict[Tuple[int, int], Handle] = {}
        for cell in self._cells:
            c = store.add_cell(cell)
            for i in range(ref.size(1)):
                v0 = cell[ref.sub_entity(i, 1, 0, 2)]
                v1 = cell[ref.sub_entity(i, 1, 1, 2)]
                key = (v0, v1) if v0 < v1 else (v1, v0)
                e = edge_map.get(key)
                if e is None:
                    e = edge_map[key] = store.add_edge(v0, v1)
                store.attach(c, i, e)
        store.touch()

        mesh = SurfaceMesh(store)
        mesh.set_indices()

        NBE = 0
        for e in range(store.number_of_edges()):
            if store.is_boundary_edge(e):
                store.boundary_id[e] = NBE
                NBE += 1

        self._store = None
        logger.info(f"create_mesh: {store.number_of_nodes()} nodes, "
                    f"{store.number_of_edges()} edges ({NBE} on the boundary), "
                    f"{store.number_of_cells()} cells.")
        return mesh
