from typing import List, Optional

from ..typing import TensorLike, Handle, Codim
from ..geometry import AffineGeometry, GeometryType, TRIANGLE
from .utils import check_codim, sub_entity_count, PartitionType, MarkState


##################################################
### Entity views
##################################################
# NOTE: a view is a (mesh, handle) pair for one record of the entity store. It
# owns nothing but its lazily built geometry. Each codimension has its own
# class with its own method set.

class _EntityView():
    codim: int

    def __init__(self, mesh, handle: Handle) -> None:
        self._mesh = mesh
        self._store = mesh.store
        self.handle = int(handle)
        self._geometry: Optional[AffineGeometry] = None

    def __eq__(self, other) -> bool:
        if not isinstance(other, _EntityView):
            return NotImplemented
        return (self._store is other._store and self.codim == other.codim
                and self.handle == other.handle)

    def __hash__(self) -> int:
        return hash((id(self._store), self.codim, self.handle))

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(handle={self.handle}, "
                f"level={self.level()}, id={self.id()})")

    def level(self) -> int:
        return self._store.level(self.codim, self.handle)

    def partition_type(self) -> PartitionType:
        return PartitionType.INTERIOR

    def type(self) -> GeometryType:
        return GeometryType(2 - self.codim)

    def id(self) -> int:
        return self._store.id(self.codim, self.handle)

    def is_leaf(self) -> bool:
        return self._store.is_leaf(self.codim, self.handle)

    def has_father(self) -> bool:
        return self._store.parent(self.codim, self.handle) >= 0

    def father(self):
        f = self._store.parent(self.codim, self.handle)
        return None if f < 0 else self._mesh.entity(self.codim, f)

    def geometry(self) -> AffineGeometry:
        if self._geometry is None:
            self._geometry = AffineGeometry(
                self.type(), self._store.corner_positions(self.codim, self.handle))
        return self._geometry

    def corners(self) -> int:
        return 3 - self.codim

    def corner(self, i: int) -> TensorLike:
        return self.geometry().corner(i)

    def count(self, codim: Codim) -> int:
        """Number of subentities of codimension `codim` (counted in the mesh)."""
        codim = check_codim(codim)
        if codim < self.codim:
            raise ValueError(f"Codimension {codim} is not a subentity codimension "
                             f"of a codim-{self.codim} entity.")
        return sub_entity_count(self.codim, codim)

    def sub_entity(self, i: int, codim: Codim):
        codim = check_codim(codim)
        h = self._store.sub_entity(self.codim, self.handle, i, codim)
        return self._mesh.entity(codim, h)

    def level_index(self) -> int:
        return self._mesh.level_index_set(self.level()).index(self)

    def leaf_index(self) -> int:
        return self._mesh.leaf_index_set().index(self)

    def sub_level_index(self, i: int, codim: Codim) -> int:
        return self._mesh.level_index_set(self.level()).sub_index(self, i, codim)

    def sub_leaf_index(self, i: int, codim: Codim) -> int:
        return self._mesh.leaf_index_set().sub_index(self, i, codim)

    def sub_id(self, i: int, codim: Codim) -> int:
        return self._mesh.global_id_set().sub_id(self, i, codim)


class Vertex(_EntityView):
    codim = 2

    def position(self) -> TensorLike:
        return self._store.node[self.handle].copy()

    def son(self):
        """The copy of this vertex on the next finer level, or None."""
        s = int(self._store.node_son[self.handle])
        return None if s < 0 else Vertex(self._mesh, s)


class Edge(_EntityView):
    codim = 1

    def children(self) -> List['Edge']:
        return [Edge(self._mesh, c) for c in self._store.children(1, self.handle)]

    def elements(self) -> List['Element']:
        """Elements incident to this edge."""
        return [Element(self._mesh, c) for c in self._store.edge2cell[self.handle]]

    def is_boundary(self) -> bool:
        return self._store.is_boundary_edge(self.handle)

    def boundary_id(self) -> int:
        return int(self._store.boundary_id[self.handle])

    def mark_state(self) -> MarkState:
        return MarkState(int(self._store.edge_mark[self.handle]))

    def leaf_edges(self) -> List['Edge']:
        return [Edge(self._mesh, e) for e in self._store.leaf_edges(self.handle)]


class Element(_EntityView):
    codim = 0

    def children(self) -> List['Element']:
        return [Element(self._mesh, c) for c in self._store.children(0, self.handle)]

    def is_new(self) -> bool:
        """True if the element was created by the last adaptation cycle."""
        return bool(self._store.cell_is_new[self.handle])

    def might_vanish(self) -> bool:
        return False

    def geometry_in_father(self) -> AffineGeometry:
        """Position of this element in the reference element of its father."""
        father = self.father()
        if father is None:
            raise RuntimeError(f"{self!r} lives on level 0 and has no father.")
        local = father.geometry().local(self._store.corner_positions(0, self.handle))
        return AffineGeometry(TRIANGLE, local)

    def has_boundary_intersections(self) -> bool:
        store = self._store
        return any(store.is_boundary_edge(e) for e in store.cell2edge[self.handle])

    def level_intersections(self):
        return self._mesh.level_intersections(self)

    def leaf_intersections(self):
        return self._mesh.leaf_intersections(self)

    def hierarchic(self, maxlevel: int):
        return self._mesh.hierarchic(self, maxlevel)


ENTITY_CLASS = {0: Element, 1: Edge, 2: Vertex}
