import math

import numpy as np
import pytest

from quadtree_compressor.quadtree import QuadTree, check_grid, round_half_up


def count_nodes(tree):
    if tree.is_color():
        return 1
    return 1 + sum(count_nodes(child) for child in tree.children)


def random_grids(seed=0, sides=(1, 2, 4, 8, 16), levels=(2, 4, 256)):
    rng = np.random.RandomState(seed)
    for side in sides:
        for level in levels:
            yield rng.randint(0, level, size=(side, side))


def log_mean(values):
    return math.exp(sum(math.log(0.1 + v) for v in values) / 4)


def test_build_examples():
    tests = (
        (np.full((4, 4), 7), "7", 1),
        ([[1, 1], [1, 1]], "1", 1),
        ([[0, 10], [10, 10]], "(0 10 10 10)", 5),
        ([[5]], "5", 1),
        (
            [[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]],
            "((1 2 5 4) 3 (7 7 8 7) 6)",
            13,
        ),
    )

    for grid, dump, n_nodes in tests:
        tree, count = QuadTree.build(grid)
        assert str(tree) == dump
        assert count == n_nodes


def test_build_empty():
    tree, n_nodes = QuadTree.build(np.zeros((0, 0), dtype=int))

    assert tree.is_empty()
    assert n_nodes == 0
    assert str(tree) == "()"
    assert tree.logarithmic_mean() is None
    assert tree.epsilon() is None
    assert tree.compress_lambda() == 0
    assert tree.to_grid(0).shape == (0, 0)


def test_build_rejects_malformed_grids():
    tests = (
        [[1, 2, 3], [4, 5, 6]],
        np.zeros((3, 3), dtype=int),
        np.zeros((6, 6), dtype=int),
        [[1, -2], [3, 4]],
        [[1.5, 2], [3, 4]],
        np.zeros((2, 2, 2), dtype=int),
    )

    for grid in tests:
        with pytest.raises(ValueError):
            QuadTree.build(grid)


def test_check_grid_max_value():
    with pytest.raises(ValueError):
        check_grid([[1, 2], [3, 300]], max_value=255)

    assert check_grid([[1.0, 2.0], [3.0, 4.0]]).dtype.kind == "i"


def test_round_trip():
    for grid in random_grids():
        tree, _ = QuadTree.build(grid)
        assert np.array_equal(tree.to_grid(grid.shape[0]), grid)
        assert np.array_equal(QuadTree.from_grid(tree.to_grid(grid.shape[0])).to_grid(grid.shape[0]), grid)


def test_node_count_conservation():
    for grid in random_grids(seed=1):
        tree, n_nodes = QuadTree.build(grid)
        assert n_nodes == count_nodes(tree) == tree.node_count()
        assert tree.leaf_count() <= grid.size


def test_fuse_is_noop_when_nothing_to_fuse():
    color = QuadTree(value=3)
    assert not color.fuse()
    assert color.value == 3

    tree, _ = QuadTree.build([[0, 10], [10, 10]])
    assert not tree.fuse()
    assert str(tree) == "(0 10 10 10)"

    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])
    assert not tree.fuse()
    assert tree.node_count() == 13


def test_fuse_equal_colors():
    tree = QuadTree(children=[QuadTree(value=4) for _ in range(4)])

    assert tree.fuse()
    assert tree.is_color()
    assert tree.value == 4
    assert tree.children is None


def test_node_kinds():
    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])
    nw, ne, se, sw = tree.children

    assert tree.is_area() and not tree.is_twig() and not tree.is_color()
    assert nw.is_twig() and se.is_twig()
    assert ne.is_color() and not ne.is_twig() and not ne.is_area()
    assert not QuadTree().is_area() and not QuadTree().is_twig()


def test_invalid_nodes():
    with pytest.raises(ValueError):
        QuadTree(value=1, children=[QuadTree(value=1)] * 4)

    with pytest.raises(ValueError):
        QuadTree(children=[QuadTree(value=1)] * 3)


def test_recolor():
    color = QuadTree(value=1)
    color.recolor(9)
    assert color.value == 9

    tree, _ = QuadTree.build([[0, 10], [10, 10]])
    with pytest.raises(ValueError):
        tree.recolor(9)
    assert str(tree) == "(0 10 10 10)"


def test_logarithmic_mean():
    tree, _ = QuadTree.build([[0, 10], [10, 10]])
    assert tree.logarithmic_mean() == pytest.approx(log_mean([0, 10, 10, 10]))

    assert QuadTree(value=42).logarithmic_mean() == 42

    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])
    expected = log_mean(
        [log_mean([1, 2, 5, 4]), 3, log_mean([7, 7, 8, 7]), 6]
    )
    assert tree.logarithmic_mean() == pytest.approx(expected)


def test_epsilon():
    tree, _ = QuadTree.build([[0, 10], [10, 10]])
    mean = log_mean([0, 10, 10, 10])
    assert tree.epsilon() == pytest.approx(max(mean, 10 - mean))

    assert QuadTree(value=42).epsilon() == 0

    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])
    means = [log_mean([1, 2, 5, 4]), 3, log_mean([7, 7, 8, 7]), 6]
    mean = log_mean(means)
    assert tree.epsilon() == pytest.approx(max(abs(mean - m) for m in means))


def test_collapse():
    tree, _ = QuadTree.build([[0, 10], [10, 10]])

    assert tree.collapse() == -4
    assert tree.is_color()
    assert tree.value == round_half_up(log_mean([0, 10, 10, 10])) == 3


def test_collapse_non_twig_is_a_bug():
    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])

    with pytest.raises(AssertionError):
        tree.collapse()

    with pytest.raises(AssertionError):
        QuadTree(value=1).collapse()


def test_compress_lambda_examples():
    tests = (
        (np.full((4, 4), 7), "7", 0),
        ([[0, 10], [10, 10]], "3", -4),
        # Both twigs collapse, the root stays an area
        (
            [[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]],
            "(3 3 7 6)",
            -8,
        ),
        # Collapsed twigs equal to their siblings are fused
        ([[3, 3, 3, 3], [3, 3, 3, 3], [3, 3, 3, 3], [3, 3, 3, 4]], "3", -8),
    )

    for grid, dump, delta in tests:
        tree, _ = QuadTree.build(grid)
        assert tree.compress_lambda() == delta
        assert str(tree) == dump


def test_compress_lambda_until_single_color():
    for grid in random_grids(seed=2, sides=(2, 4, 8, 16)):
        tree, n_nodes = QuadTree.build(grid)

        while n_nodes > 1:
            delta = tree.compress_lambda()
            assert delta < 0
            n_nodes += delta
            assert n_nodes == tree.node_count()

        assert tree.is_color()
        assert tree.compress_lambda() == 0


def test_to_grid_after_compression():
    tree, _ = QuadTree.build([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]])
    tree.compress_lambda()

    expected = [[3, 3, 3, 3], [3, 3, 3, 3], [6, 6, 7, 7], [6, 6, 7, 7]]
    assert tree.to_grid(4).tolist() == expected

    with pytest.raises(ValueError):
        tree.to_grid(3)


def test_dump_and_save(tmp_path):
    tree, _ = QuadTree.build([[0, 10], [10, 10]])
    path = tree.save(tmp_path / "tree.txt")

    assert path.read_text() == "(0 10 10 10)"

    with pytest.raises(FileExistsError):
        tree.save(path)

    tree.compress_lambda()
    tree.save(path, overwrite=True)
    assert path.read_text() == "3"
