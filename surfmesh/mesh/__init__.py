
from .utils import PartitionType, MarkState, estr2codim, codim2str
from .entity_store import EntityStore
from .entity import Vertex, Edge, Element
from .index_sets import LevelIndexSet, LeafIndexSet, GlobalIdSet, LocalIdSet
from .intersection import LevelIntersection, LeafIntersection
from .intersection_iterators import LevelIntersectionIterator, LeafIntersectionIterator
from .hierarchic_iterator import HierarchicIterator
from .surface_mesh import SurfaceMesh
from .factory import SurfaceMeshFactory
