from .reference_element import (
    GeometryType, ReferenceElement, reference_element,
    VERTEX, LINE, TRIANGLE, local_edge
)
from .affine_geometry import AffineGeometry, geometry
