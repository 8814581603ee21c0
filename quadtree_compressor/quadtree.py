import math
from pathlib import Path

import numpy as np

LOG_OFFSET = 0.1  # Avoids ln(0) for black pixels


def is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def round_half_up(x):
    return int(math.floor(x + 0.5))


def check_grid(grid, max_value=None):
    """Validate a grid and return it as a 2D integer array.

    Parameters
    ----------
    grid : array_like
        Square matrix of non-negative integers, side must be a power of two.

    max_value : int, optional (default=None)
        Maximal allowed intensity. Not checked if None.

    Returns
    -------
    grid : np.array
        Validated grid with an integer dtype.

    """

    grid = np.asarray(grid)

    if grid.size == 0:
        return np.zeros((0, 0), dtype=np.int64)

    if grid.ndim != 2 or grid.shape[0] != grid.shape[1]:
        raise ValueError(f"Grid must be square, but shape {grid.shape} given.")

    if not is_power_of_two(grid.shape[0]):
        raise ValueError(
            f"Grid side must be a power of two, but {grid.shape[0]} given."
        )

    if not np.issubdtype(grid.dtype, np.integer):
        if not np.issubdtype(grid.dtype, np.floating) or not np.all(
            grid == np.floor(grid)
        ):
            raise ValueError(f"Grid values must be integers, but {grid.dtype} given.")
        grid = grid.astype(np.int64)

    if grid.min() < 0:
        raise ValueError(f"Grid values must be non-negative, but {grid.min()} given.")

    if max_value is not None and grid.max() > max_value:
        raise ValueError(
            f"Grid values must be in 0..{max_value}, but {grid.max()} given."
        )

    return grid


class QuadTree:
    """Area quadtree over a square grid of intensities.

    A node is either a color (``value`` is set, no children) or an area
    (``value`` is None, four children in NW, NE, SE, SW order). A tree built
    from an empty grid has neither.

    The area uses a reference frame with the origin in the top-left corner,
    x growing to the right and y growing to the bottom.

    Parameters
    ----------
    value : int, optional (default=None)
        Color of the node.

    children : list of QuadTree, optional (default=None)
        Sub-areas: north-west, north-east, south-east, south-west.

    Examples
    --------
    >>> tree, n_nodes = QuadTree.build([[0, 10], [10, 10]])
    >>> str(tree), n_nodes
    ('(0 10 10 10)', 5)
    >>> tree.compress_lambda()
    -4
    >>> str(tree)
    '3'

    """

    NW, NE, SE, SW = range(4)

    def __init__(self, value=None, children=None):
        if value is not None and children is not None:
            raise ValueError("A node cannot be both a color and an area.")
        if children is not None and len(children) != 4:
            raise ValueError(f"An area has 4 sub-areas, but {len(children)} given.")

        self.value = value
        self.children = None if children is None else list(children)

    @classmethod
    def build(cls, grid):
        """Build a quadtree from a grid.

        Equal sub-areas are fused while building.

        Parameters
        ----------
        grid : array_like
            Square matrix of non-negative integers, side must be a power of two.

        Returns
        -------
        tree : QuadTree
            Built tree.

        n_nodes : int
            Number of nodes (colors and areas) in the built tree.

        """

        grid = check_grid(grid)

        if grid.size == 0:
            return cls(), 0

        return cls._build(grid, 0, 0, grid.shape[0])

    @classmethod
    def _build(cls, grid, line, column, side):
        if side == 1:
            return cls(value=int(grid[line, column])), 1

        half = side // 2
        origins = (
            (line, column),
            (line, column + half),
            (line + half, column + half),
            (line + half, column),
        )

        children = []
        n_nodes = 1
        for line_, column_ in origins:
            child, n_child = cls._build(grid, line_, column_, half)
            children.append(child)
            n_nodes += n_child

        node = cls(children=children)
        if node.fuse():
            n_nodes -= 4

        return node, n_nodes

    @classmethod
    def from_grid(cls, grid):
        return cls.build(grid)[0]

    def is_empty(self):
        return self.value is None and self.children is None

    def is_color(self):
        return self.value is not None

    def is_area(self):
        return self.value is None and self.children is not None

    def is_twig(self):
        """Check that the node is an area of four colors."""

        return self.is_area() and all(child.is_color() for child in self.children)

    def set_color(self, value):
        """Turn the node into a color, dropping its sub-areas."""

        self.value = int(value)
        self.children = None

    def recolor(self, value):
        if not self.is_color():
            raise ValueError("Only a color can be recolored.")
        self.value = int(value)

    def fuse(self):
        """Fuse an area whose sub-areas are the same color.

        Returns
        -------
        fused : bool
            True if the area was replaced by a color.

        """

        if not self.is_twig():
            return False

        values = {child.value for child in self.children}
        if len(values) != 1:
            return False

        self.set_color(values.pop())
        return True

    def node_count(self):
        if self.is_empty():
            return 0
        if self.is_color():
            return 1
        return 1 + sum(child.node_count() for child in self.children)

    def leaf_count(self):
        if self.is_empty():
            return 0
        if self.is_color():
            return 1
        return sum(child.leaf_count() for child in self.children)

    def logarithmic_mean(self):
        """Compute the logarithmic mean of the luminosity.

        For a twig the mean is taken over the values of its colors, for any
        other area each child contributes its own logarithmic mean.

        Returns
        -------
        mean : float or None
            Logarithmic mean, None for an empty tree.

        """

        if self.is_empty():
            return None

        if self.is_color():
            return float(self.value)

        if self.is_twig():
            values = [child.value for child in self.children]
        else:
            values = [child.logarithmic_mean() for child in self.children]

        return math.exp(sum(math.log(LOG_OFFSET + v) for v in values) / 4)

    def epsilon(self):
        """Compute the loss of replacing the node by its logarithmic mean.

        Returns
        -------
        epsilon : float or None
            Greatest difference between the logarithmic mean of the node and
            its children (values for a twig, logarithmic means otherwise).
            0 for a color, None for an empty tree.

        """

        if self.is_empty():
            return None

        if self.is_color():
            return 0.0

        mean = self.logarithmic_mean()

        if self.is_twig():
            values = [child.value for child in self.children]
        else:
            values = [child.logarithmic_mean() for child in self.children]

        return max(abs(mean - v) for v in values)

    def collapse(self):
        """Replace a twig by its rounded logarithmic mean.

        Returns
        -------
        delta : int
            Variation of the number of nodes, always -4.

        """

        assert self.is_twig(), f"Cannot collapse a node that is not a twig: {self}"

        self.set_color(round_half_up(self.logarithmic_mean()))
        return -4

    def compress_lambda(self):
        """Compress one level of the tree.

        Every twig becomes a color, then areas whose sub-areas became equal
        colors are fused.

        Returns
        -------
        delta : int
            Variation of the number of nodes.

        """

        if not self.is_area():
            return 0

        if self.is_twig():
            return self.collapse()

        delta = sum(child.compress_lambda() for child in self.children)
        if self.fuse():
            delta -= 4

        return delta

    def compress_rho(self, rho, n_nodes):
        """Compress the tree until rho percent of its nodes remain.

        See `quadtree_compressor.twigs.compress_rho`.

        """

        from .twigs import compress_rho

        return compress_rho(self, rho, n_nodes)

    def _fill(self, grid, line, column, side):
        if self.is_color():
            grid[line : line + side, column : column + side] = self.value
            return

        half = side // 2
        self.children[self.NW]._fill(grid, line, column, half)
        self.children[self.NE]._fill(grid, line, column + half, half)
        self.children[self.SE]._fill(grid, line + half, column + half, half)
        self.children[self.SW]._fill(grid, line + half, column, half)

    def to_grid(self, side):
        """Convert the tree into a grid.

        Parameters
        ----------
        side : int
            Side of the grid, must be a power of two.

        Returns
        -------
        grid : np.array
            Square matrix of intensities implied by the tree.

        """

        if self.is_empty():
            return np.zeros((0, 0), dtype=np.int64)

        if not is_power_of_two(side):
            raise ValueError(f"Grid side must be a power of two, but {side} given.")

        grid = np.zeros((side, side), dtype=np.int64)
        self._fill(grid, 0, 0, side)
        return grid

    def _dump(self, parts):
        if self.is_color():
            parts.append(str(self.value))
            return

        parts.append("(")
        for index, child in enumerate(self.children):
            if index:
                parts.append(" ")
            child._dump(parts)
        parts.append(")")

    def __str__(self):
        if self.is_empty():
            return "()"

        parts = []
        self._dump(parts)
        return "".join(parts)

    def __repr__(self):
        if self.is_color():
            return f"QuadTree(value={self.value})"
        if self.is_empty():
            return "QuadTree()"
        return f"QuadTree(children={self.children!r})"

    def save(self, path, overwrite=False):
        """Write the tree dump into a text file.

        Parameters
        ----------
        path : str or Path
            Destination file.

        overwrite : bool, optional (default=False)
            Replace the file if it exists.

        """

        path = Path(path)
        if path.exists() and not overwrite:
            raise FileExistsError(f"File {path} already exists.")

        path.write_text(str(self))
        return path
