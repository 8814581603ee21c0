from typing import NamedTuple, Optional

from .avl import AVL
from .quadtree import QuadTree


class Twig(NamedTuple):
    """Candidate for compression, linked to the candidate of its parent.

    ``parent`` is only followed upwards after ``node`` has been collapsed.
    It is None for the root of the tree.
    """

    node: QuadTree
    parent: Optional["Twig"]


class TwigList:
    """Twigs of a quadtree sorted by epsilon.

    Parameters
    ----------
    tree : QuadTree
        Root of the tree to compress. The tree must not be modified by
        anything else while the list is in use.

    Examples
    --------
    >>> tree, n_nodes = QuadTree.build([[0, 0, 9, 8], [0, 1, 9, 9], [5, 5, 5, 5], [5, 5, 5, 5]])
    >>> twigs = TwigList(tree)
    >>> len(twigs)
    2
    >>> twigs.compress_next()
    -4
    >>> str(tree)
    '(0 (9 8 9 9) 5 5)'

    """

    def __init__(self, tree):
        self._twigs = AVL()
        self._fill(tree, None)

    def _fill(self, tree, parent):
        if not tree.is_area():
            return

        twig = Twig(tree, parent)
        if tree.is_twig():
            self.add(twig)
        else:
            for child in tree.children:
                self._fill(child, twig)

    def __len__(self):
        return len(self._twigs)

    def __bool__(self):
        return bool(self._twigs)

    def is_empty(self):
        return self._twigs.is_empty()

    def add(self, twig):
        self._twigs.insert(twig.node.epsilon(), twig)

    def peek(self):
        """Return the twig that would be compressed next, None if empty."""

        return self._twigs.find_min()

    def pop(self):
        return self._twigs.extract_min()

    def merge(self, twig):
        """Collapse a popped twig and register its ancestor if it became one.

        Ancestors whose sub-areas became equal colors are fused on the way.

        Parameters
        ----------
        twig : Twig
            Twig removed from the list.

        Returns
        -------
        delta : int
            Variation of the number of nodes.

        """

        delta = twig.node.collapse()

        parent = twig.parent
        while parent is not None:
            if parent.node.is_color():
                parent = parent.parent
            elif parent.node.fuse():
                delta -= 4
                parent = parent.parent
            else:
                break

        # Otherwise the ancestor still has a sub-area waiting for compression
        if parent is not None and parent.node.is_twig():
            self.add(parent)

        return delta

    def compress_next(self):
        """Compress the twig with the smallest epsilon.

        Returns
        -------
        delta : int
            Variation of the number of nodes, 0 if the list is empty.

        """

        twig = self.pop()
        if twig is None:
            return 0
        return self.merge(twig)


def compress_rho(tree, rho, n_nodes):
    """Greedily compress the tree until rho percent of its nodes remain.

    Twigs are collapsed by increasing epsilon, so the least lossy merges are
    done first.

    Parameters
    ----------
    tree : QuadTree
        Tree to compress in place.

    rho : int
        Percentage of nodes to keep, in 0..100.

    n_nodes : int
        Current number of nodes in the tree.

    Returns
    -------
    delta : int
        Variation of the number of nodes.

    """

    if not 0 <= rho <= 100:
        raise ValueError(f"rho must be in 0..100, but {rho} given.")

    if rho == 100:
        return 0

    target = n_nodes * rho // 100
    twigs = TwigList(tree)

    current = n_nodes
    while twigs and current > target:
        current += twigs.compress_next()

    return current - n_nodes
