from typing import List, Tuple

from ..typing import Handle
from .entity_store import EntityStore
from .utils import MarkState


# corners of the 4 children in terms of p = [v0, v1, v2, m0, m1, m2], where m_i
# is the midpoint of local edge i; same numbering as TriangleMesh.uniform_refine
CHILD_CELL = ((0, 5, 4), (5, 1, 3), (4, 3, 2), (3, 4, 5))

# local edge j of child k is either the half of parent edge `e` touching
# parent corner `v` (('half', e, v)) or interior edge `i` (('inner', i))
CHILD_EDGE = (
    (('inner', 0), ('half', 1, 0), ('half', 2, 0)),
    (('half', 0, 1), ('inner', 1), ('half', 2, 1)),
    (('half', 0, 2), ('half', 1, 2), ('inner', 2)),
    (('inner', 0), ('inner', 1), ('inner', 2)),
)

# interior edge i is local edge i of the middle child (m0, m1, m2)
INNER_EDGE = ((4, 5), (5, 3), (3, 4))


def _node_son(store: EntityStore, v: Handle, level: int) -> Handle:
    """The copy of vertex `v` on `level`, created on demand."""
    son = int(store.node_son[v])
    if son >= 0:
        return son
    return store.add_node(store.node[v], level=level, father=v)


def bisect_edge(store: EntityStore, e: Handle) -> Tuple[Handle, Handle, Handle]:
    """Split edge `e` at its midpoint into two children on the next level.

    The elements still using `e` become incident to both children, so that a
    coarse element keeps seeing the finer side across a hanging edge. Returns
    (child0, child1, midpoint); child0 starts at the first vertex of `e`.
    """
    if not store.is_leaf(1, e):
        c0, c1 = (int(c) for c in store.edge_child[e])
        return c0, c1, int(store.edge[c0, 1])

    level = store.level(1, e) + 1
    v0, v1 = (int(v) for v in store.edge[e])
    w0 = _node_son(store, v0, level)
    w1 = _node_son(store, v1, level)
    m = store.add_node(0.5*(store.node[v0] + store.node[v1]), level=level)

    c0 = store.add_edge(w0, m, level=level, parent=e)
    c1 = store.add_edge(m, w1, level=level, parent=e)
    store.set_edge_children(e, c0, c1)
    store.edge_mark[e] = MarkState.DO_NOTHING

    for cell in store.edge2cell[e]:
        store.edge2cell[c0].append(cell)
        store.edge2cell[c1].append(cell)
    return c0, c1, m


def _half(store: EntityStore, children: Tuple[Handle, Handle], corner: Handle) -> Handle:
    c0, c1 = children
    if corner in store.edge[c0]:
        return c0
    return c1


def refine_cell(store: EntityStore, c: Handle) -> List[Handle]:
    """Red refinement of the leaf triangle `c` into 4 children.

    Bounding edges are bisected (or their existing children reused), the
    corners are copied to the next level, 3 interior edges are created and all
    incident lists are updated. Returns the handles of the children.
    """
    if not store.is_leaf(0, c):
        raise ValueError(f"Cell {c} has already been refined.")

    level = store.level(0, c) + 1
    corners = [int(v) for v in store.cell[c]]
    edges = [int(e) for e in store.cell2edge[c]]

    p = [_node_son(store, v, level) for v in corners]
    halves = []
    for i, e in enumerate(edges):
        c0, c1, m = bisect_edge(store, e)
        # c is replaced by its children on the halves of its edges
        for h in (c0, c1):
            if c in store.edge2cell[h]:
                store.detach(c, h)
        p.append(m)
        halves.append((c0, c1))

    inner = [store.add_edge(p[a], p[b], level=level) for a, b in INNER_EDGE]

    children = []
    for k in range(4):
        child = store.add_cell([p[i] for i in CHILD_CELL[k]], level=level, parent=c)
        store.cell_is_new[child] = True
        for j, (kind, *args) in enumerate(CHILD_EDGE[k]):
            if kind == 'inner':
                store.attach(child, j, inner[args[0]])
            else:
                i, v = args
                store.attach(child, j, _half(store, halves[i], p[v]))
        children.append(child)

    store.cell_mark[c] = 0
    store.touch()
    return children
