from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..typing import TensorLike, Handle, Codim
from ..common import DynamicArray
from .. import logger
from .utils import check_codim, sub_entity_count, MarkState


##################################################
### Entity Store
##################################################
# NOTE: EntityStore is the arena that owns every vertex, edge and element record
# of all refinement levels. Records are rows of parallel growable arrays, one
# set per entity kind. All links between records (corners, bounding edges,
# incident elements, parent/child) are integer handles into these arrays, and
# -1 stands for "none".

class EntityStore():
    def __init__(self, GD: int, *, itype=np.int32, ftype=np.float64) -> None:
        if GD < 2:
            raise ValueError(f"A surface mesh needs an ambient space of dimension "
                             f">= 2, got {GD}.")
        self.GD = GD
        self.itype = itype
        self.ftype = ftype

        # codim 2: nodes
        self.node = DynamicArray((0, GD), dtype=ftype)
        self.node_father = DynamicArray(0, dtype=itype, fill=-1)
        self.node_son = DynamicArray(0, dtype=itype, fill=-1)

        # codim 1: edges
        self.edge = DynamicArray((0, 2), dtype=itype, fill=-1)
        self.edge_parent = DynamicArray(0, dtype=itype, fill=-1)
        self.edge_child = DynamicArray((0, 2), dtype=itype, fill=-1)
        self.edge_mark = DynamicArray(0, dtype=np.int8, fill=MarkState.DO_NOTHING)
        self.boundary_id = DynamicArray(0, dtype=itype, fill=-1)
        self.edge2cell: List[List[Handle]] = []

        # codim 0: cells
        self.cell = DynamicArray((0, 3), dtype=itype, fill=-1)
        self.cell2edge = DynamicArray((0, 3), dtype=itype, fill=-1)
        self.cell_parent = DynamicArray(0, dtype=itype, fill=-1)
        self.cell_mark = DynamicArray(0, dtype=np.int8, fill=0)
        self.cell_is_new = DynamicArray(0, dtype=np.bool_, fill=False)
        self.cell_children: List[List[Handle]] = []

        # columns shared by all kinds, keyed by codim
        self._level: Dict[int, DynamicArray] = {}
        self._id: Dict[int, DynamicArray] = {}
        self._level_index: Dict[int, DynamicArray] = {}
        self._leaf_index: Dict[int, DynamicArray] = {}
        for codim in range(3):
            self._level[codim] = DynamicArray(0, dtype=itype, fill=-1)
            self._id[codim] = DynamicArray(0, dtype=np.int64, fill=-1)
            self._level_index[codim] = DynamicArray(0, dtype=itype, fill=-1)
            self._leaf_index[codim] = DynamicArray(0, dtype=itype, fill=-1)

        # _levels[l][codim] is the ordered list of handles living on level l
        self._levels: List[Tuple[List[Handle], List[Handle], List[Handle]]] = []
        self._free_id = [0, 0, 0]

        # bumped on every structural change, index sets compare against it
        self.revision = 0

    ### counters
    def max_level(self) -> int:
        return len(self._levels) - 1

    def count(self, codim: Codim, level: Optional[int]=None) -> int:
        """Return the number of records of a kind, on one level or in total."""
        codim = check_codim(codim)
        if level is None:
            return len(self._level[codim])
        if level < 0 or level > self.max_level():
            return 0
        return len(self._levels[level][codim])

    def number_of_nodes(self): return self.count(2)
    def number_of_edges(self): return self.count(1)
    def number_of_cells(self): return self.count(0)

    def level_entities(self, codim: Codim, level: int) -> Tuple[Handle, ...]:
        """Handles of the given kind on `level`, in creation order."""
        codim = check_codim(codim)
        if level < 0 or level > self.max_level():
            raise ValueError(f"Level {level} does not exist, the mesh has levels "
                             f"0..{self.max_level()}.")
        return tuple(self._levels[level][codim])

    ### record creation
    def _ensure_level(self, level: int) -> None:
        while len(self._levels) <= level:
            self._levels.append(([], [], []))

    def _new_record(self, codim: int, level: int) -> Handle:
        self._ensure_level(level)
        h = self._level[codim].append(level)
        self._id[codim].append(self._free_id[codim])
        self._free_id[codim] += 1
        self._level_index[codim].append(-1)
        self._leaf_index[codim].append(-1)
        self._levels[level][codim].append(h)
        return h

    def add_node(self, pos: TensorLike, level: int=0, father: Handle=-1) -> Handle:
        pos = np.asarray(pos, dtype=self.ftype)
        if pos.shape != (self.GD,):
            raise ValueError(f"Vertex position must have shape ({self.GD},), "
                             f"got {pos.shape}.")
        h = self._new_record(2, level)
        self.node.append(pos)
        self.node_father.append(father)
        self.node_son.append(-1)
        if father >= 0:
            self.node_son[father] = h
        return h

    def add_edge(self, v0: Handle, v1: Handle, level: int=0, parent: Handle=-1) -> Handle:
        h = self._new_record(1, level)
        self.edge.append([v0, v1])
        self.edge_parent.append(parent)
        self.edge_child.append([-1, -1])
        self.edge_mark.append(MarkState.DO_NOTHING)
        self.boundary_id.append(-1 if parent < 0 else self.boundary_id[parent])
        self.edge2cell.append([])
        return h

    def add_cell(self, vertices: Sequence[Handle], level: int=0, parent: Handle=-1) -> Handle:
        if len(vertices) != 3:
            raise ValueError(f"A triangle has 3 corners, got {len(vertices)}.")
        h = self._new_record(0, level)
        self.cell.append(vertices)
        self.cell2edge.append([-1, -1, -1])
        self.cell_parent.append(parent)
        self.cell_mark.append(0)
        self.cell_is_new.append(False)
        self.cell_children.append([])
        if parent >= 0:
            self.cell_children[parent].append(h)
        return h

    def attach(self, cell: Handle, i: int, edge: Handle) -> None:
        """Make `edge` the i-th bounding edge of `cell` and record the cell as
        incident to the edge."""
        self.cell2edge[cell, i] = edge
        self.edge2cell[edge].append(cell)

    def detach(self, cell: Handle, edge: Handle) -> None:
        """Drop `cell` from the incident list of `edge`."""
        self.edge2cell[edge].remove(cell)

    def set_edge_children(self, edge: Handle, c0: Handle, c1: Handle) -> None:
        self.edge_child[edge] = [c0, c1]

    def touch(self) -> None:
        """Record a structural change; every index computed before is stale."""
        self.revision += 1
        logger.debug(f"entity store revision {self.revision}: {self.count(0)} cells, "
                     f"{self.count(1)} edges, {self.count(2)} nodes on "
                     f"{self.max_level() + 1} levels.")

    ### refinement tree
    def level(self, codim: Codim, h: Handle) -> int:
        return int(self._level[check_codim(codim)][h])

    def id(self, codim: Codim, h: Handle) -> int:
        return int(self._id[check_codim(codim)][h])

    def level_index(self, codim: Codim, h: Handle) -> int:
        return int(self._level_index[check_codim(codim)][h])

    def leaf_index(self, codim: Codim, h: Handle) -> int:
        return int(self._leaf_index[check_codim(codim)][h])

    def parent(self, codim: Codim, h: Handle) -> Handle:
        """The father of a record, -1 on level 0."""
        codim = check_codim(codim)
        if codim == 0:
            return int(self.cell_parent[h])
        elif codim == 1:
            return int(self.edge_parent[h])
        return int(self.node_father[h])

    def children(self, codim: Codim, h: Handle) -> Tuple[Handle, ...]:
        """The sons of a record, empty for a leaf."""
        codim = check_codim(codim)
        if codim == 0:
            return tuple(self.cell_children[h])
        elif codim == 1:
            c0, c1 = self.edge_child[h]
            return () if c0 < 0 else (int(c0), int(c1))
        son = int(self.node_son[h])
        return () if son < 0 else (son,)

    def is_leaf(self, codim: Codim, h: Handle) -> bool:
        codim = check_codim(codim)
        if codim == 0:
            return len(self.cell_children[h]) == 0
        elif codim == 1:
            return self.edge_child[h, 0] < 0
        return self.node_son[h] < 0

    def leaf_edges(self, edge: Handle) -> List[Handle]:
        """The leaf edges below `edge` (the edge itself when it is a leaf),
        ordered from the edge's first vertex to its second."""
        leaves = []
        stack = [edge]
        while stack:
            e = stack.pop()
            c0, c1 = self.edge_child[e]
            if c0 < 0:
                leaves.append(int(e))
            else:
                stack.append(int(c1))
                stack.append(int(c0))
        return leaves

    def is_ancestor_edge(self, ancestor: Handle, edge: Handle) -> bool:
        """True if `ancestor` is `edge` or one of its fathers."""
        e = edge
        while e >= 0:
            if e == ancestor:
                return True
            e = self.edge_parent[e]
        return False

    ### topology
    def cell_to_node(self, h: Handle) -> TensorLike:
        return self.cell[h].copy()

    def cell_to_edge(self, h: Handle) -> TensorLike:
        return self.cell2edge[h].copy()

    def edge_to_node(self, h: Handle) -> TensorLike:
        return self.edge[h].copy()

    def edge_to_cell(self, h: Handle) -> Tuple[Handle, ...]:
        return tuple(self.edge2cell[h])

    def sub_entity(self, codim: Codim, h: Handle, i: int, subcodim: Codim) -> Handle:
        """Handle of the i-th subentity of codimension `subcodim` (counted in
        the mesh) of the codim-`codim` record `h`."""
        codim = check_codim(codim)
        subcodim = check_codim(subcodim)
        if subcodim < codim:
            raise ValueError(f"Codimension {subcodim} is not a subentity "
                             f"codimension of a codim-{codim} entity.")
        n = sub_entity_count(codim, subcodim)
        if i < 0 or i >= n:
            raise IndexError(f"Subentity {i} of codimension {subcodim} does not "
                             f"exist, a codim-{codim} entity has {n}.")
        if subcodim == codim:
            return h
        if codim == 0:
            return int(self.cell2edge[h, i]) if subcodim == 1 else int(self.cell[h, i])
        return int(self.edge[h, i])

    def corner_positions(self, codim: Codim, h: Handle) -> TensorLike:
        """Ordered corner positions of a record, shape (ncorners, GD)."""
        codim = check_codim(codim)
        if codim == 0:
            return self.node[self.cell[h]]
        elif codim == 1:
            return self.node[self.edge[h]]
        return self.node[[h]]

    def is_boundary_edge(self, h: Handle) -> bool:
        return len(self.edge2cell[h]) == 1
