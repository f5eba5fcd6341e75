from typing import List, Optional, Tuple

from ..typing import Handle
from .intersection import LevelIntersection, LeafIntersection


# number of edges of a triangle, the edge index of the end position
NEDGES = 3


class LevelIntersectionIterator():
    """Iterator over the intersections of an element with the elements of its
    own level.

    The position is (edge_index, neighbor_index), where neighbor_index points
    into the incident list of the current edge. An edge without a same-level
    neighbour is visited once as a boundary intersection with neighbor_index
    equal to the length of the incident list. The end position is
    (3, 0).
    """
    def __init__(self, mesh, center: Handle, end: bool=False) -> None:
        self._mesh = mesh
        self._store = mesh.store
        self.center = center
        self._level = self._store.level(0, center)
        self._intersection: Optional[LevelIntersection] = None
        if end:
            self.edge_index, self.neighbor_index = NEDGES, 0
        else:
            self.edge_index, self.neighbor_index = 0, 0
            self._settle()

    def _incident(self) -> List[Handle]:
        return self._store.edge2cell[self._store.cell2edge[self.center, self.edge_index]]

    def _is_candidate(self, cell: Handle) -> bool:
        return cell != self.center and self._store.level(0, cell) == self._level

    def _settle(self) -> None:
        """Move forward to the first valid position at or after the current one."""
        while self.edge_index < NEDGES:
            incident = self._incident()
            start = self.neighbor_index
            for k in range(start, len(incident)):
                if self._is_candidate(incident[k]):
                    self.neighbor_index = k
                    return
            if start == 0:
                # no neighbour on this level: a boundary intersection
                self.neighbor_index = len(incident)
                return
            self.edge_index += 1
            self.neighbor_index = 0
        self.neighbor_index = 0

    def at_end(self) -> bool:
        return self.edge_index == NEDGES

    def increment(self) -> None:
        if self.at_end():
            self.neighbor_index = 0
            return
        self._intersection = None
        if self.neighbor_index == len(self._incident()):
            self.edge_index += 1
            self.neighbor_index = 0
        else:
            self.neighbor_index += 1
        self._settle()

    def dereference(self) -> LevelIntersection:
        if self.at_end():
            raise RuntimeError("Cannot dereference a one past the end iterator.")
        if self._intersection is None:
            edge = int(self._store.cell2edge[self.center, self.edge_index])
            incident = self._incident()
            outside = -1
            if self.neighbor_index < len(incident):
                outside = incident[self.neighbor_index]
            self._intersection = LevelIntersection(
                self._mesh, self.center, self.edge_index, edge, outside)
        return self._intersection

    def __eq__(self, other) -> bool:
        if not isinstance(other, LevelIntersectionIterator):
            return NotImplemented
        return (self.center == other.center
                and self.edge_index == other.edge_index
                and self.neighbor_index == other.neighbor_index)

    def __iter__(self):
        return self

    def __next__(self) -> LevelIntersection:
        if self.at_end():
            raise StopIteration
        intersection = self.dereference()
        self.increment()
        return intersection


class LeafIntersectionIterator():
    """Iterator over the intersections of an element with the leaf elements.

    Every edge of the center is first expanded into the leaf edges below it.
    The candidates across a leaf edge are its incident elements other than the
    center; a leaf edge without candidates is a boundary intersection. The
    edge -> leaf edge -> neighbour structure is flattened into one sequence.
    """
    def __init__(self, mesh, center: Handle, end: bool=False) -> None:
        self._mesh = mesh
        self._store = mesh.store
        self.center = center
        self._intersection: Optional[LeafIntersection] = None
        self._items: List[Tuple[int, Handle, Handle]] = []
        if not end:
            self._collect()
        self._pos = 0 if not end else len(self._items)

    def _collect(self) -> None:
        store = self._store
        for i in range(NEDGES):
            edge = int(store.cell2edge[self.center, i])
            for leaf_edge in store.leaf_edges(edge):
                outside = [c for c in store.edge2cell[leaf_edge] if c != self.center]
                if len(outside) == 0:
                    self._items.append((i, leaf_edge, -1))
                else:
                    self._items.extend((i, leaf_edge, c) for c in outside)

    def at_end(self) -> bool:
        return self._pos >= len(self._items)

    def _position(self) -> Tuple[int, Handle, Handle]:
        if self.at_end():
            return (NEDGES, -1, -1)
        return self._items[self._pos]

    @property
    def edge_index(self) -> int:
        return self._position()[0]

    def increment(self) -> None:
        if self.at_end():
            raise RuntimeError("Cannot increment a one past the end iterator.")
        self._intersection = None
        self._pos += 1

    def dereference(self) -> LeafIntersection:
        if self.at_end():
            raise RuntimeError("Cannot dereference a one past the end iterator.")
        if self._intersection is None:
            i, leaf_edge, outside = self._items[self._pos]
            self._intersection = LeafIntersection(
                self._mesh, self.center, i, leaf_edge, outside)
        return self._intersection

    def __eq__(self, other) -> bool:
        if not isinstance(other, LeafIntersectionIterator):
            return NotImplemented
        return self.center == other.center and self._position() == other._position()

    def __iter__(self):
        return self

    def __next__(self) -> LeafIntersection:
        if self.at_end():
            raise StopIteration
        intersection = self.dereference()
        self.increment()
        return intersection
