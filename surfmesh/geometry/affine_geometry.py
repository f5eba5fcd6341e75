from math import factorial

import numpy as np

from ..typing import TensorLike
from .reference_element import GeometryType


class AffineGeometry():
    """Affine map from a reference simplex onto its corners in world space.

    The map is x = p0 + xi @ JT, where the rows of JT are p_i - p0. For
    entities of lower dimension than the world (edges, surface triangles in 3-d)
    the inverse is taken in the least-squares sense.
    """
    def __init__(self, gtype: GeometryType, corners: TensorLike) -> None:
        corners = np.asarray(corners, dtype=np.float64)
        if corners.ndim != 2 or corners.shape[0] != gtype.dim + 1:
            raise ValueError(f"A {gtype} needs {gtype.dim + 1} corners, "
                             f"got array of shape {corners.shape}.")
        self.gtype = gtype
        self.mydim = gtype.dim
        self.coorddim = corners.shape[1]
        self._corners = corners
        self._jt = corners[1:] - corners[0]
        gram = self._jt @ self._jt.T
        self._ie = np.sqrt(np.linalg.det(gram)) if self.mydim > 0 else 1.0
        if self.mydim > 0:
            self._jit = self._jt.T @ np.linalg.inv(gram)
        else:
            self._jit = np.zeros((self.coorddim, 0), dtype=np.float64)

    def type(self) -> GeometryType:
        return self.gtype

    def affine(self) -> bool:
        return True

    def corners(self) -> int:
        return self._corners.shape[0]

    def corner(self, i: int) -> TensorLike:
        if i < 0 or i >= self._corners.shape[0]:
            raise IndexError(f"Corner {i} does not exist in a {self.gtype}.")
        return self._corners[i].copy()

    def center(self) -> TensorLike:
        return np.mean(self._corners, axis=0)

    def global_(self, local: TensorLike) -> TensorLike:
        local = np.asarray(local, dtype=np.float64)
        return self._corners[0] + local @ self._jt

    def local(self, x: TensorLike) -> TensorLike:
        x = np.asarray(x, dtype=np.float64)
        return (x - self._corners[0]) @ self._jit

    def integration_element(self, local: TensorLike=None) -> float:
        return self._ie

    def volume(self) -> float:
        return self._ie / factorial(self.mydim)

    def jacobian_transposed(self, local: TensorLike=None) -> TensorLike:
        return self._jt.copy()

    def jacobian_inverse_transposed(self, local: TensorLike=None) -> TensorLike:
        return self._jit.copy()


def geometry(gtype: GeometryType, corners: TensorLike) -> AffineGeometry:
    """Evaluate the geometry of an entity from its ordered corner positions."""
    return AffineGeometry(gtype, corners)
