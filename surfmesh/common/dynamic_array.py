import numpy as np
# https://github.com/maciejkula/dynarray.git


class DynamicArray(object):
    """A numpy array that grows along its first axis.

    The data lives in a buffer of `capacity` rows; only the first `size` rows
    are visible. Appending doubles the capacity when the buffer is full, so a
    sequence of appends costs amortised O(1) per row.
    """
    def __init__(self, data, dtype=None, capacity=16, fill=None):
        if isinstance(data, int):
            shape = (data, )
        elif isinstance(data, tuple):
            shape = data
        else:
            data = np.asarray(data, dtype=dtype)
            shape = data.shape

        self.dtype = np.dtype(dtype or getattr(data, 'dtype', np.int_))
        self.size = shape[0]
        self.capacity = max(self.size, capacity)
        self._trailing = tuple(shape[1:])
        self.fill = fill
        self.data = np.empty((self.capacity,) + self._trailing, dtype=self.dtype)
        if fill is not None:
            self.data[:] = fill

        if isinstance(data, np.ndarray):
            self.data[:self.size] = data

    @property
    def shape(self):
        return (self.size,) + self._trailing

    @property
    def ndim(self):
        return len(self.shape)

    def __getitem__(self, idx):
        return self.data[:self.size][idx]

    def __setitem__(self, idx, value):
        self.data[:self.size][idx] = value

    def __len__(self):
        return self.size

    def __iter__(self):
        return iter(self.data[:self.size])

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.data[:self.size]
        return self.data[:self.size].astype(dtype)

    def grow(self, new_capacity):
        data = np.empty((new_capacity,) + self._trailing, dtype=self.dtype)
        if self.fill is not None:
            data[:] = self.fill
        data[:self.size] = self.data[:self.size]
        self.data = data
        self.capacity = new_capacity

    def _as_dtype(self, value):
        if hasattr(value, 'dtype') and value.dtype == self.dtype:
            return value
        else:
            return np.array(value, dtype=self.dtype)

    def append(self, value):
        """
        Append a row to the array and return its position.
        The row's shape has to match the array's trailing dimensions.
        """
        value = self._as_dtype(value)

        if value.shape != self._trailing:
            value_unit_shaped = value.shape == (1,) or len(value.shape) == 0
            self_unit_shaped = len(self._trailing) == 0

            if not (value_unit_shaped and self_unit_shaped):
                raise ValueError('Input shape {} incompatible with '
                                 'array shape {}'.format(value.shape,
                                                         self._trailing))
            value = value.reshape(())

        if self.size == self.capacity:
            self.grow(max(1, self.capacity * 2))
        self.data[self.size] = value
        self.size += 1
        return self.size - 1

    def extend(self, values):
        """
        Extend the array with a set of rows.
        The rows' dimensions must match the trailing dimensions
        of the array.
        """
        values = self._as_dtype(values)
        if values.shape[1:] != self._trailing:
            raise ValueError('Input shape {} incompatible with '
                             'array shape {}'.format(values.shape[1:],
                                                     self._trailing))

        required_size = self.size + values.shape[0]

        if required_size > self.capacity:
            self.grow(max(self.capacity * 2, required_size))

        self.data[self.size:required_size] = values
        self.size = required_size

    def shrink(self):
        """
        Reduce the array's capacity to its size.
        """
        self.grow(self.size)

    def __repr__(self):
        return (self.data[:self.size].__repr__()
                .replace('array',
                         'DynamicArray(size={}, capacity={})'
                         .format(self.size, self.capacity), 1))
