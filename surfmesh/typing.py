import builtins
from typing import Union, Literal

import numpy as np


### Types

TensorLike = np.ndarray
Handle = builtins.int
EntityName = Literal['cell', 'edge', 'node']
Codim = Union[builtins.int, EntityName]
