from typing import List

from ..typing import Handle


class HierarchicIterator():
    """Iterator over the descendants of an element, no deeper than `maxlevel`.

    Depth-first search with an explicit stack: the top of the stack is the
    current element, `increment` pops it and pushes its children if its level
    is below `maxlevel` and it is not a leaf. The element the search starts
    from is not part of the sequence.
    """
    def __init__(self, mesh, element: Handle, maxlevel: int, end: bool=False) -> None:
        self._mesh = mesh
        self._store = mesh.store
        self.maxlevel = maxlevel
        self._stack: List[Handle] = []
        if not end:
            self._push_children(element)

    def _push_children(self, h: Handle) -> None:
        store = self._store
        if store.level(0, h) < self.maxlevel and not store.is_leaf(0, h):
            self._stack.extend(store.children(0, h))

    def current(self) -> Handle:
        """Handle of the element the iterator points at, -1 at the end."""
        return self._stack[-1] if self._stack else -1

    def at_end(self) -> bool:
        return not self._stack

    def increment(self) -> None:
        if not self._stack:
            return
        h = self._stack.pop()
        self._push_children(h)

    def dereference(self):
        if not self._stack:
            raise RuntimeError("Cannot dereference a one past the end iterator.")
        return self._mesh.entity(0, self._stack[-1])

    def __eq__(self, other) -> bool:
        if not isinstance(other, HierarchicIterator):
            return NotImplemented
        return self.current() == other.current()

    def __iter__(self):
        return self

    def __next__(self):
        if not self._stack:
            raise StopIteration
        e = self.dereference()
        self.increment()
        return e
