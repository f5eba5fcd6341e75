from typing import List

import numpy as np

from .. import logger
from ..typing import Codim
from ..geometry import GeometryType
from .entity_store import EntityStore
from .utils import check_codim, DIM


##################################################
### Index sets
##################################################
# NOTE: indices are not maintained incrementally. Every structural change of
# the store bumps its revision, and an index set whose revision is behind must
# be updated before it can be queried again.

class _IndexSetBase():
    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._revision = -1
        self._size = [0, 0, 0]
        self._types: List[List[GeometryType]] = [[], [], []]

    def is_valid(self) -> bool:
        return self._revision == self._store.revision

    def _check(self) -> None:
        if not self.is_valid():
            raise RuntimeError(f"{self.__class__.__name__} is out of date with the "
                               f"mesh, call update() after refinement.")

    def _update_types(self) -> None:
        for codim in range(DIM + 1):
            if self._size[codim] > 0:
                self._types[codim] = [GeometryType(DIM - codim)]
            else:
                self._types[codim] = []

    def _column(self, codim: int):
        raise NotImplementedError

    def _lookup(self, codim: int, h: int) -> int:
        idx = int(self._column(codim)[h])
        if idx < 0:
            raise ValueError(f"Codim-{codim} entity {h} is not contained in "
                             f"this {self.__class__.__name__}.")
        return idx

    def index(self, entity) -> int:
        """Index of an entity view in this set."""
        self._check()
        if not self.contains(entity):
            raise ValueError(f"{entity!r} is not contained in this "
                             f"{self.__class__.__name__}.")
        return self._lookup(entity.codim, entity.handle)

    def sub_index(self, entity, i: int, codim: Codim) -> int:
        """Index of the i-th subentity of codimension `codim` of an entity."""
        self._check()
        codim = check_codim(codim)
        h = self._store.sub_entity(entity.codim, entity.handle, i, codim)
        return self._lookup(codim, h)

    def size(self, codim: Codim) -> int:
        self._check()
        return self._size[check_codim(codim)]

    def size_of_type(self, gtype: GeometryType) -> int:
        self._check()
        if gtype.dim < 0 or gtype.dim > DIM or not gtype.is_simplex():
            return 0
        return self._size[DIM - gtype.dim]

    def geom_types(self, codim: Codim) -> List[GeometryType]:
        """All geometry types of the given codimension present in this set."""
        self._check()
        return list(self._types[check_codim(codim)])


class LevelIndexSet(_IndexSetBase):
    """Dense indices 0..n-1 per kind over the entities of one level."""
    def __init__(self, store: EntityStore, level: int) -> None:
        super().__init__(store)
        self.level = level

    def _column(self, codim: int):
        return self._store._level_index[codim]

    def update(self) -> None:
        store = self._store
        for codim in range(DIM + 1):
            handles = store.level_entities(codim, self.level)
            n = len(handles)
            if n > 0:
                self._column(codim)[np.array(handles)] = np.arange(n)
            self._size[codim] = n
        self._update_types()
        self._revision = store.revision

    def contains(self, entity) -> bool:
        return entity.level() == self.level


class LeafIndexSet(_IndexSetBase):
    """Dense indices 0..n-1 per kind over the leaf entities.

    Leaf cells are numbered level by level. Edges and nodes are visited from
    the finest level to the coarsest: a leaf gets a fresh index, a node that
    has been copied to a finer level shares the index of its copy, a refined
    edge is not part of the leaf set.
    """
    def _column(self, codim: int):
        return self._store._leaf_index[codim]

    def update(self) -> None:
        store = self._store
        L = store.max_level()

        # cells
        column = self._column(0)
        n = 0
        for level in range(L + 1):
            for h in store.level_entities(0, level):
                if store.is_leaf(0, h):
                    column[h] = n
                    n += 1
                else:
                    column[h] = -1
        self._size[0] = n

        # edges
        column = self._column(1)
        n = 0
        for level in range(L, -1, -1):
            for h in store.level_entities(1, level):
                if store.is_leaf(1, h):
                    column[h] = n
                    n += 1
                else:
                    column[h] = -1
        self._size[1] = n

        # nodes
        column = self._column(2)
        n = 0
        for level in range(L, -1, -1):
            for h in store.level_entities(2, level):
                son = store.node_son[h]
                if son < 0:
                    column[h] = n
                    n += 1
                else:
                    column[h] = column[son]
        self._size[2] = n

        self._update_types()
        self._revision = store.revision
        logger.info(f"leaf index set updated: {self._size[0]} cells, "
                    f"{self._size[1]} edges, {self._size[2]} nodes.")

    def contains(self, entity) -> bool:
        if entity.codim == 2:
            return True
        return entity.is_leaf()


class GlobalIdSet():
    """Permanent ids, assigned once when a record is created."""
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def id(self, entity) -> int:
        return self._store.id(entity.codim, entity.handle)

    def sub_id(self, entity, i: int, codim: Codim) -> int:
        codim = check_codim(codim)
        h = self._store.sub_entity(entity.codim, entity.handle, i, codim)
        return self._store.id(codim, h)

    def update(self) -> None:
        pass


class LocalIdSet(GlobalIdSet):
    """Ids are unique within the whole mesh, so local and global ids agree."""
    pass
