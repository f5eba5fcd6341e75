from typing import Any, Dict, List, Optional, Union

import numpy as np
from scipy.sparse import csr_matrix
from tqdm import tqdm

from .. import logger
from ..typing import TensorLike, Handle, Codim
from ..geometry import GeometryType
from .entity_store import EntityStore
from .entity import ENTITY_CLASS, Element
from .index_sets import LevelIndexSet, LeafIndexSet, GlobalIdSet, LocalIdSet
from .intersection_iterators import LevelIntersectionIterator, LeafIntersectionIterator
from .hierarchic_iterator import HierarchicIterator
from .refine import refine_cell
from .utils import check_codim, DIM


class SurfaceMesh():
    """Hierarchically refinable triangle mesh of a 2-manifold embedded in
    R^GD, GD >= 2.

    All vertex, edge and element records of every level live in one
    `EntityStore`. The mesh hands out light-weight views (`Vertex`, `Edge`,
    `Element`) on these records, keeps the index sets of all levels and of the
    leaf set up to date, and drives the adaptation cycle
    `mark -> pre_adapt -> adapt -> post_adapt`.

    Meshes are built with `SurfaceMeshFactory` or with the constructors
    `from_arrays`, `from_one_triangle` and `from_box`.
    """
    dimension = DIM

    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self.dimworld = store.GD
        self.itype = store.itype
        self.ftype = store.ftype

        self._level_sets: Dict[int, LevelIndexSet] = {}
        self._leaf_set = LeafIndexSet(store)
        self._global_id_set = GlobalIdSet(store)
        self._local_id_set = LocalIdSet(store)

    def __repr__(self) -> str:
        return (f"SurfaceMesh(GD={self.dimworld}, levels={self.max_level() + 1}, "
                f"cells={self.number_of_cells()}, edges={self.number_of_edges()}, "
                f"nodes={self.number_of_nodes()})")

    ## @ingroup MeshGenerators
    @classmethod
    def from_arrays(cls, node: TensorLike, cell: TensorLike, *,
                    itype=np.int32, ftype=np.float64) -> 'SurfaceMesh':
        """Build a level-0 mesh from a node array of shape (NN, GD) and a
        triangle array of shape (NC, 3)."""
        from .factory import SurfaceMeshFactory
        node = np.asarray(node, dtype=ftype)
        cell = np.asarray(cell)
        if node.ndim != 2:
            raise ValueError(f"node must be a 2-d array, got shape {node.shape}.")
        if cell.ndim != 2 or cell.shape[1] != 3:
            raise ValueError(f"cell must have shape (NC, 3), got {cell.shape}.")

        factory = SurfaceMeshFactory(node.shape[1], itype=itype, ftype=ftype)
        for p in node:
            factory.insert_vertex(p)
        for c in cell:
            factory.insert_element(GeometryType(2), c)
        return factory.create_mesh()

    ## @ingroup MeshGenerators
    @classmethod
    def from_one_triangle(cls, meshtype='iso') -> 'SurfaceMesh':
        if meshtype == 'equ':
            node = np.array([
                [0.0, 0.0],
                [1.0, 0.0],
                [0.5, np.sqrt(3) / 2]], dtype=np.float64)
        elif meshtype == 'iso':
            node = np.array([
                [0.0, 0.0],
                [1.0, 0.0],
                [0.0, 1.0]], dtype=np.float64)
        else:
            raise ValueError(f"Unknown meshtype '{meshtype}', use 'iso' or 'equ'.")
        cell = np.array([[0, 1, 2]], dtype=np.int32)
        return cls.from_arrays(node, cell)

    ## @ingroup MeshGenerators
    @classmethod
    def from_box(cls, box=[0, 1, 0, 1], nx=10, ny=10, *,
                 itype=np.int32, ftype=np.float64) -> 'SurfaceMesh':
        """Generate a triangle mesh for a box domain.

        @param box
        @param nx Number of divisions along the x-axis (default: 10)
        @param ny Number of divisions along the y-axis (default: 10)
        @return SurfaceMesh instance
        """
        NN = (nx + 1) * (ny + 1)
        x = np.linspace(box[0], box[1], nx+1, dtype=ftype)
        y = np.linspace(box[2], box[3], ny+1, dtype=ftype)
        X, Y = np.meshgrid(x, y, indexing='ij')

        node = np.concatenate((X.reshape(-1, 1), Y.reshape(-1, 1)), axis=1)

        idx = np.arange(NN, dtype=itype).reshape(nx + 1, ny + 1)
        cell0 = np.concatenate((
            idx[1:, 0:-1].T.reshape(-1, 1),
            idx[1:, 1:].T.reshape(-1, 1),
            idx[0:-1, 0:-1].T.reshape(-1, 1),
            ), axis=1)
        cell1 = np.concatenate((
            idx[0:-1, 1:].T.reshape(-1, 1),
            idx[0:-1, 0:-1].T.reshape(-1, 1),
            idx[1:, 1:].T.reshape(-1, 1)
            ), axis=1)
        cell = np.concatenate((cell0, cell1), axis=0)
        return cls.from_arrays(node, cell, itype=itype, ftype=ftype)

    ### counters
    def max_level(self) -> int:
        return self.store.max_level()

    def size(self, codim: Codim, level: Optional[int]=None) -> int:
        """Number of entities of codimension `codim` on `level`, or in the
        leaf set when `level` is None."""
        codim = check_codim(codim)
        if level is None:
            return self.leaf_index_set().size(codim)
        return self.store.count(codim, level)

    def size_of_type(self, gtype: GeometryType, level: Optional[int]=None) -> int:
        if level is None:
            return self.leaf_index_set().size_of_type(gtype)
        return self.level_index_set(level).size_of_type(gtype)

    def number_of_nodes(self) -> int:
        return self.store.number_of_nodes()

    def number_of_edges(self) -> int:
        return self.store.number_of_edges()

    def number_of_cells(self) -> int:
        return self.store.number_of_cells()

    ### index and id sets
    def level_index_set(self, level: int) -> LevelIndexSet:
        if level < 0 or level > self.max_level():
            raise ValueError(f"Level {level} does not exist, the mesh has levels "
                             f"0..{self.max_level()}.")
        iset = self._level_sets.get(level)
        if iset is None:
            iset = self._level_sets[level] = LevelIndexSet(self.store, level)
        if not iset.is_valid():
            iset.update()
        return iset

    def leaf_index_set(self) -> LeafIndexSet:
        if not self._leaf_set.is_valid():
            self._leaf_set.update()
        return self._leaf_set

    def set_indices(self) -> None:
        """Recompute the index sets of all levels and of the leaf set."""
        for level in range(self.max_level() + 1):
            self.level_index_set(level)
        self.leaf_index_set()

    def global_id_set(self) -> GlobalIdSet:
        return self._global_id_set

    def local_id_set(self) -> LocalIdSet:
        return self._local_id_set

    ### entities
    def entity(self, codim: Codim, h: Handle):
        """View on the codim-`codim` record with handle `h`."""
        codim = check_codim(codim)
        if h < 0 or h >= self.store.count(codim):
            raise IndexError(f"Codim-{codim} handle {h} is out of range, the mesh "
                             f"holds {self.store.count(codim)} such entities.")
        return ENTITY_CLASS[codim](self, h)

    def level_entities(self, codim: Codim, level: int) -> List:
        codim = check_codim(codim)
        cls = ENTITY_CLASS[codim]
        return [cls(self, h) for h in self.store.level_entities(codim, level)]

    def leaf_entities(self, codim: Codim) -> List:
        """Leaf entities ordered by their leaf index."""
        codim = check_codim(codim)
        iset = self.leaf_index_set()
        cls = ENTITY_CLASS[codim]
        handles = [None] * iset.size(codim)
        column = self.store._leaf_index[codim]
        for level in range(self.max_level() + 1):
            for h in self.store.level_entities(codim, level):
                if self.store.is_leaf(codim, h):
                    handles[column[h]] = h
        return [cls(self, h) for h in handles]

    @staticmethod
    def _handle(element: Union[Element, Handle]) -> Handle:
        if isinstance(element, Element):
            return element.handle
        return int(element)

    ### neighbours and descendants
    def level_intersections(self, element, end: bool=False) -> LevelIntersectionIterator:
        return LevelIntersectionIterator(self, self._handle(element), end=end)

    def leaf_intersections(self, element, end: bool=False) -> LeafIntersectionIterator:
        return LeafIntersectionIterator(self, self._handle(element), end=end)

    def hierarchic(self, element, maxlevel: int, end: bool=False) -> HierarchicIterator:
        return HierarchicIterator(self, self._handle(element), maxlevel, end=end)

    ### adaptation
    def adaptive_options(self, maxlevel: Optional[int]=None, disp: bool=False) -> Dict[str, Any]:
        options = {
                'maxlevel': maxlevel,
                'disp': disp
            }
        return options

    def mark(self, refcount: int, element) -> bool:
        """Request `refcount` refinement steps for a leaf element.

        Returns False if the request is not accepted: the element is not a
        leaf, or coarsening (`refcount < 0`) is requested.
        """
        h = self._handle(element)
        if not self.store.is_leaf(0, h):
            return False
        if refcount < 0:
            return False
        self.store.cell_mark[h] = refcount
        return True

    def get_mark(self, element) -> int:
        return int(self.store.cell_mark[self._handle(element)])

    def pre_adapt(self) -> bool:
        """True if an element might vanish in the next `adapt`."""
        return False

    def adapt(self, options: Optional[Dict[str, Any]]=None) -> bool:
        """Refine all marked leaf elements, as often as they are marked.

        Returns True if the mesh changed.
        """
        if options is None:
            options = self.adaptive_options()
        maxlevel = options['maxlevel']
        store = self.store

        changed = False
        marked = np.nonzero(np.asarray(store.cell_mark) > 0)[0]
        while len(marked) > 0:
            for c in marked.tolist():
                count = int(store.cell_mark[c])
                store.cell_mark[c] = 0
                if not store.is_leaf(0, c):
                    continue
                if maxlevel is not None and store.level(0, c) >= maxlevel:
                    continue
                for child in refine_cell(store, c):
                    store.cell_mark[child] = count - 1
                changed = True
            marked = np.nonzero(np.asarray(store.cell_mark) > 0)[0]

        if changed:
            self.set_indices()
            if options['disp']:
                logger.info(f"adapt: {self.size(0)} leaf cells on "
                            f"{self.max_level() + 1} levels.")
        return changed

    def post_adapt(self) -> None:
        """Clear the `is_new` flags and the marks of the last adaptation cycle."""
        self.store.cell_is_new[:] = False
        self.store.cell_mark[:] = 0

    def refine_element(self, element) -> List[Element]:
        """Refine one leaf element into 4 children."""
        children = refine_cell(self.store, self._handle(element))
        return [Element(self, c) for c in children]

    def global_refine(self, n: int=1, disp: bool=False) -> None:
        """Refine every leaf element `n` times."""
        for i in tqdm(range(n), desc='global refine', disable=not disp):
            leaves = [h for level in range(self.max_level() + 1)
                      for h in self.store.level_entities(0, level)
                      if self.store.is_leaf(0, h)]
            for h in leaves:
                refine_cell(self.store, h)
        self.post_adapt()
        self.set_indices()
        logger.info(f"global refine x{n}: {self.size(0)} leaf cells, "
                    f"{self.max_level() + 1} levels.")

    ### distributed
    def overlap_size(self, codim: Codim, level: Optional[int]=None) -> int:
        raise NotImplementedError("SurfaceMesh is a sequential mesh without overlap.")

    def ghost_size(self, codim: Codim, level: Optional[int]=None) -> int:
        raise NotImplementedError("SurfaceMesh is a sequential mesh without ghosts.")

    def communicate(self, *args, **kwargs):
        raise NotImplementedError("SurfaceMesh is a sequential mesh.")

    def load_balance(self, *args, **kwargs):
        raise NotImplementedError("SurfaceMesh is a sequential mesh.")

    ### array exports
    def leaf_node(self) -> TensorLike:
        """Positions of the leaf vertices, row i holds the vertex with leaf
        index i."""
        iset = self.leaf_index_set()
        store = self.store
        node = np.zeros((iset.size(2), self.dimworld), dtype=self.ftype)
        leaf = np.asarray(store.node_son) < 0
        node[np.asarray(store._leaf_index[2])[leaf]] = np.asarray(store.node)[leaf]
        return node

    def leaf_cell(self) -> TensorLike:
        """Corner leaf indices of the leaf cells, ordered by leaf index."""
        iset = self.leaf_index_set()
        store = self.store
        cell = np.asarray(store.cell)
        isLeaf = np.array([len(c) == 0 for c in store.cell_children], dtype=np.bool_)
        leaf_cell = np.zeros((iset.size(0), 3), dtype=self.itype)
        idx = np.asarray(store._leaf_index[0])[isLeaf]
        leaf_cell[idx] = np.asarray(store._leaf_index[2])[cell[isLeaf]]
        return leaf_cell

    def level_node(self, level: int) -> TensorLike:
        iset = self.level_index_set(level)
        store = self.store
        handles = np.array(store.level_entities(2, level), dtype=self.itype)
        node = np.zeros((iset.size(2), self.dimworld), dtype=self.ftype)
        if len(handles) > 0:
            node[np.asarray(store._level_index[2])[handles]] = np.asarray(store.node)[handles]
        return node

    def level_cell(self, level: int) -> TensorLike:
        iset = self.level_index_set(level)
        store = self.store
        handles = np.array(store.level_entities(0, level), dtype=self.itype)
        cell = np.zeros((iset.size(0), 3), dtype=self.itype)
        if len(handles) > 0:
            idx = np.asarray(store._level_index[0])[handles]
            cell[idx] = np.asarray(store._level_index[2])[np.asarray(store.cell)[handles]]
        return cell

    def cell_to_cell(self, level: Optional[int]=None) -> csr_matrix:
        """Sparse adjacency of the cells of one level, or of the leaf cells
        when `level` is None."""
        if level is None:
            iset = self.leaf_index_set()
            cells = self.leaf_entities(0)
            intersections = self.leaf_intersections
        else:
            iset = self.level_index_set(level)
            cells = self.level_entities(0, level)
            intersections = self.level_intersections

        I = []
        J = []
        for e in cells:
            for it in intersections(e):
                if it.neighbor():
                    I.append(iset.index(e))
                    J.append(iset.index(it.outside()))
        NC = iset.size(0)
        val = np.ones(len(I), dtype=np.bool_)
        return csr_matrix((val, (I, J)), shape=(NC, NC))
