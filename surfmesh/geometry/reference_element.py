from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np


@dataclass(frozen=True)
class GeometryType:
    """Shape tag of a mesh entity. Only simplices occur in a surface mesh."""
    dim: int
    basic_type: str = 'simplex'

    def is_vertex(self) -> bool: return self.dim == 0
    def is_line(self) -> bool: return self.dim == 1
    def is_triangle(self) -> bool: return self.dim == 2 and self.basic_type == 'simplex'
    def is_simplex(self) -> bool: return self.basic_type == 'simplex'

    def __str__(self) -> str:
        return {0: 'vertex', 1: 'line', 2: 'triangle'}.get(self.dim, f'{self.basic_type}{self.dim}')


VERTEX = GeometryType(0)
LINE = GeometryType(1)
TRIANGLE = GeometryType(2)

# local edge i of the triangle is opposite to local vertex i
local_edge = np.array([(1, 2), (2, 0), (0, 1)], dtype=np.int32)


class ReferenceElement():
    """Topology and coordinates of a reference simplex.

    The reference triangle has corners (0, 0), (1, 0), (0, 1); its edge `i`
    joins the corners `local_edge[i]`. The reference line is [0, 1].
    """
    def __init__(self, gtype: GeometryType) -> None:
        if not gtype.is_simplex() or gtype.dim > 2:
            raise ValueError(f"Unsupported reference element: {gtype}")
        self.gtype = gtype
        self.dim = gtype.dim
        self._corners = np.eye(self.dim + 1, self.dim, k=-1, dtype=np.float64)

        # _subs[c][i] lists, for every codim cc >= c, the element-level numbers
        # of the codim-cc subentities of the i-th codim-c subentity.
        self._subs: Dict[int, List[Dict[int, Tuple[int, ...]]]] = {}
        nv = self.dim + 1
        if self.dim == 0:
            self._subs[0] = [{0: (0,)}]
        elif self.dim == 1:
            self._subs[0] = [{0: (0,), 1: (0, 1)}]
            self._subs[1] = [{1: (0,)}, {1: (1,)}]
        else:
            self._subs[0] = [{0: (0,), 1: (0, 1, 2), 2: (0, 1, 2)}]
            self._subs[1] = [{1: (i,), 2: tuple(int(v) for v in local_edge[i])}
                             for i in range(3)]
            self._subs[2] = [{2: (i,)} for i in range(nv)]

    def _check(self, i: int, c: int):
        if c not in self._subs:
            raise ValueError(f"Codimension {c} does not exist in a {self.gtype} "
                             f"reference element.")
        if i < 0 or i >= len(self._subs[c]):
            raise IndexError(f"Subentity {i} of codimension {c} does not exist "
                             f"in a {self.gtype} reference element.")

    def size(self, c: int, i: int=0, cc: int=None) -> int:
        """Number of codim-`c` subentities, or with `cc` given, the number of
        codim-`cc` subentities of the i-th codim-`c` subentity."""
        if cc is None:
            if c not in self._subs:
                raise ValueError(f"Codimension {c} does not exist in a {self.gtype} "
                                 f"reference element.")
            return len(self._subs[c])
        self._check(i, c)
        return len(self._subs[c][i].get(cc, ()))

    def sub_entity(self, i: int, c: int, ii: int, cc: int) -> int:
        """Element-level number of the ii-th codim-`cc` subentity of the i-th
        codim-`c` subentity."""
        self._check(i, c)
        subs = self._subs[c][i].get(cc)
        if subs is None:
            raise ValueError(f"Codimension {cc} is not a subentity codimension of "
                             f"codimension {c}.")
        if ii < 0 or ii >= len(subs):
            raise IndexError(f"Subentity {ii} of codimension {cc} does not exist.")
        return subs[ii]

    def corners(self) -> np.ndarray:
        return self._corners.copy()

    def position(self, i: int, c: int) -> np.ndarray:
        """Barycenter of the i-th codim-`c` subentity in local coordinates."""
        self._check(i, c)
        vertices = self._subs[c][i][self.dim]
        return np.mean(self._corners[list(vertices)], axis=0)

    def type(self, i: int=0, c: int=0) -> GeometryType:
        self._check(i, c)
        return GeometryType(self.dim - c)


_REFERENCE_ELEMENTS = {gt: ReferenceElement(gt) for gt in (VERTEX, LINE, TRIANGLE)}


def reference_element(gtype: GeometryType) -> ReferenceElement:
    try:
        return _REFERENCE_ELEMENTS[gtype]
    except KeyError:
        raise ValueError(f"Unsupported reference element: {gtype}") from None
