import logging

__version__ = '0.3.0'

logger = logging.getLogger('surfmesh')
logger.setLevel(logging.WARNING)
handler = logging.StreamHandler()
formatter = logging.Formatter('[%(asctime)s][%(levelname)s] %(name)s: %(message)s', datefmt='%m-%d %H:%M:%S')
handler.setFormatter(formatter)

if not logger.handlers:
    logger.addHandler(handler)
    logger.propagate = False

from .mesh import SurfaceMesh, SurfaceMeshFactory
from .geometry import GeometryType, reference_element
