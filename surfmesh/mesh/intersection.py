from typing import Any, Callable, Dict, Optional

import numpy as np

from ..typing import TensorLike, Handle
from ..geometry import AffineGeometry, LINE, local_edge


class Intersection():
    """The part of the boundary of an element shared with one neighbour, or
    with the domain boundary.

    Parameters:
        mesh (SurfaceMesh): the mesh.
        center (int): handle of the inside element.
        edge_index (int): local number of the inside edge containing the
            intersection.
        edge (int): handle of the edge carrying the intersection, either the
            inside edge itself or a leaf edge below it.
        outside (int): handle of the neighbour, -1 on a boundary.

    Geometric quantities are computed on first use and kept for the lifetime
    of the object.
    """
    def __init__(self, mesh, center: Handle, edge_index: int, edge: Handle,
                 outside: Handle=-1) -> None:
        self._mesh = mesh
        self._store = mesh.store
        self.center = center
        self.edge_index = edge_index
        self.edge = edge
        self._outside = outside
        self._cache: Dict[str, Any] = {}

    def _cached(self, key: str, func: Callable[[], Any]):
        if key not in self._cache:
            self._cache[key] = func()
        return self._cache[key]

    ### topology
    def inside(self):
        return self._mesh.entity(0, self.center)

    def outside(self):
        if self._outside < 0:
            return None
        return self._mesh.entity(0, self._outside)

    def boundary(self) -> bool:
        return self._outside < 0

    def neighbor(self) -> bool:
        return self._outside >= 0

    def boundary_id(self) -> int:
        """Boundary id of the edge, -1 for edges inside the domain."""
        return int(self._store.boundary_id[self.edge])

    def conforming(self) -> bool:
        raise NotImplementedError

    def index_in_inside(self) -> int:
        return self.edge_index

    def index_in_outside(self) -> int:
        if self._outside < 0:
            raise RuntimeError("A boundary intersection has no outside element.")
        store = self._store
        for j, e in enumerate(store.cell2edge[self._outside]):
            if store.is_ancestor_edge(e, self.edge) or store.is_ancestor_edge(self.edge, e):
                return j
        raise RuntimeError(f"Cell {self._outside} does not contain edge {self.edge}, "
                           f"the incident lists are inconsistent.")

    def type(self):
        return LINE

    ### geometry
    def geometry(self) -> AffineGeometry:
        """Geometry of the intersection in world coordinates."""
        return self._cached('geometry', lambda: AffineGeometry(
            LINE, self._store.corner_positions(1, self.edge)))

    def geometry_in_inside(self) -> AffineGeometry:
        """Geometry of the intersection in the reference element of the inside."""
        def build():
            inside = self.inside().geometry()
            return AffineGeometry(LINE, inside.local(self._store.corner_positions(1, self.edge)))
        return self._cached('geometry_in_inside', build)

    def geometry_in_outside(self) -> AffineGeometry:
        """Geometry of the intersection in the reference element of the outside."""
        if self._outside < 0:
            raise RuntimeError("A boundary intersection has no outside element.")
        def build():
            outside = self.outside().geometry()
            return AffineGeometry(LINE, outside.local(self._store.corner_positions(1, self.edge)))
        return self._cached('geometry_in_outside', build)

    def _unit_normal(self) -> TensorLike:
        node = self._store.corner_positions(0, self.center)
        i = self.edge_index
        a = node[local_edge[i, 0]]
        t = node[local_edge[i, 1]] - a
        v = node[i] - a
        # component of the opposite corner orthogonal to the edge points inwards
        n = v - (v @ t)/(t @ t)*t
        return -n/np.linalg.norm(n)

    def unit_outer_normal(self, local: Optional[TensorLike]=None) -> TensorLike:
        """Unit normal of the edge, tangential to the inside element and
        pointing away from it."""
        return self._cached('unit_normal', self._unit_normal).copy()

    def center_unit_outer_normal(self) -> TensorLike:
        return self.unit_outer_normal()

    def integration_outer_normal(self, local: Optional[TensorLike]=None) -> TensorLike:
        """Outer normal scaled with the integration element of the intersection."""
        return self.unit_outer_normal()*self.geometry().integration_element()

    outer_normal = integration_outer_normal


class LevelIntersection(Intersection):
    """Intersection between two elements of the same level."""
    def conforming(self) -> bool:
        return True


class LeafIntersection(Intersection):
    """Intersection between two leaf elements, possibly of different levels."""
    def conforming(self) -> bool:
        if self._outside < 0:
            return True
        store = self._store
        return (self.edge == int(store.cell2edge[self.center, self.edge_index])
                and store.level(0, self._outside) == store.level(0, self.center))
