from .dynamic_array import DynamicArray
