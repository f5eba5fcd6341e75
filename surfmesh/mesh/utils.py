from enum import IntEnum
from math import comb
from typing import Union

from ..typing import Codim


##################################################
### Utils
##################################################

class PartitionType(IntEnum):
    INTERIOR = 0
    BORDER = 1
    OVERLAP = 2
    FRONT = 3
    GHOST = 4


class MarkState(IntEnum):
    DO_NOTHING = 0
    COARSEN = 1
    REFINE = 2
    IS_COARSENED = 3


# the mesh is a 2-manifold: codim 0 = cell, 1 = edge, 2 = node
DIM = 2
CODIM_NAMES = ('cell', 'edge', 'node')


def estr2codim(estr: Union[str, int]) -> int:
    """Return the codimension for an entity name; integers are checked and
    passed through."""
    if isinstance(estr, str):
        if estr == 'cell':
            return 0
        elif estr in ('edge', 'face'):
            return 1
        elif estr == 'node':
            return 2
        else:
            raise KeyError(f'{estr} is not a valid entity name in surfmesh.')
    return check_codim(estr)


def check_codim(codim: Codim) -> int:
    if isinstance(codim, str):
        return estr2codim(codim)
    if not (0 <= codim <= DIM):
        raise ValueError(f"Non-existing codimension {codim} requested, "
                         f"valid codimensions are 0 <= codim <= {DIM}.")
    return int(codim)


def sub_entity_count(codim: int, subcodim: int) -> int:
    """Number of codim-`subcodim` subentities of a codim-`codim` simplex."""
    if subcodim < codim:
        return 0
    # a simplex of dimension d has comb(d+1, k+1) faces of dimension k
    d, k = DIM - codim, DIM - subcodim
    return comb(d + 1, k + 1)


def codim2str(codim: int) -> str:
    return CODIM_NAMES[check_codim(codim)]
