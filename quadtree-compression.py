# %%
"""
# Сжатие изображений квадродеревом

## Немного теории
Квадратное изображение со стороной `2^k` раскладывается в квадродерево: каждая область делится на четыре квадранта
в порядке NW, NE, SE, SW, пока квадрант не станет одноцветным.

### Определения
**Цвет**: лист дерева, хранит яркость пикселя или одноцветной области.

**Ветка (twig)**: область, все четыре ребенка которой являются цветами.

**Логарифмическое среднее**: `exp(mean(ln(0.1 + v)))` по четырем цветам ветки. Отклонение ветки `epsilon` --
максимальное отклонение ее цветов от логарифмического среднего.

**Идея алгоритма**:

Лямбда-сжатие:
1. каждая ветка дерева заменяется цветом, равным округленному логарифмическому среднему
2. области, у которых все четыре ребенка стали одинаковыми цветами, сливаются

Ро-сжатие:
1. все ветки складываются в AVL-дерево по `epsilon`
2. ветка с наименьшим `epsilon` сворачивается, предки проверяются на слияние и на то, не стали ли они ветками
3. процесс повторяется, пока в дереве больше `rho` процентов исходного числа узлов
"""

# %%
import matplotlib.pyplot as plt
import numpy as np
from skimage import data

from quadtree_compressor import PGMImage, QuadTree, TwigList
from quadtree_compressor.analysis import (
    compression_stats,
    format_stats,
    plot_sweep,
    rho_sweep,
    show_compression,
)

# %%
"""
Первым делом нужно загрузить картинку. `camera` уже серая и имеет размер 512x512.
"""

# %%
camera = data.camera()

plt.imshow(camera, cmap="gray")
plt.show()

# %%
"""
## Строим дерево
"""

# %%
image = PGMImage(camera, max_value=255)
print(image.side, image.n_nodes)

# %%
"""
#### Проверим на маленьком примере
"""


# %%
def test_small_tree():
    tests = (
        ([[0, 10], [10, 10]], "(0 10 10 10)", 5, "3"),
        ([[1, 2, 3, 3], [4, 5, 3, 3], [6, 6, 7, 7], [6, 6, 7, 8]], "((1 2 5 4) 3 (7 7 8 7) 6)", 13, "(3 3 7 6)"),
    )

    for grid, dump, n_nodes, dump_lambda in tests:
        tree, count = QuadTree.build(grid)
        assert str(tree) == dump
        assert count == n_nodes

        tree.compress_lambda()
        assert str(tree) == dump_lambda


test_small_tree()

# %%
"""
## Лямбда-сжатие

Одно лямбда-сжатие убирает нижний уровень дерева целиком.
"""

# %%
lambda_images = []
for n in range(1, 4):
    lambda_image = PGMImage(camera, max_value=255)
    for _ in range(n):
        lambda_image.compress_lambda()
    lambda_images.append(lambda_image)

show_compression(camera, lambda_images, [f"lambda x{n}" for n in range(1, 4)])

# %%
print(format_stats(compression_stats(camera, lambda_images[0]), "lambda"))

# %%
"""
## Ро-сжатие

В отличие от лямбда-сжатия, ро-сжатие сворачивает сначала самые однородные ветки.
"""

# %%
rho_images = []
for rho in (50, 25, 10):
    rho_image = PGMImage(camera, max_value=255)
    rho_image.compress_rho(rho)
    rho_images.append(rho_image)

show_compression(camera, rho_images, ["rho 50", "rho 25", "rho 10"])

# %%
"""
#### Сравним с лямбда-сжатием при том же числе узлов
"""

# %%
rho_image = PGMImage(camera, max_value=255)
rho_image.compress_rho(round(100 * lambda_images[0].n_nodes / rho_image.n_nodes_initial))

print(format_stats(compression_stats(camera, lambda_images[0]), "lambda"))
print(format_stats(compression_stats(camera, rho_image), "rho"))

# %%
"""
#### В каком порядке сворачиваются ветки?

Первыми извлекаются ветки с наименьшим отклонением. После слияния предок может стать новой веткой с меньшим
отклонением, поэтому на всем сжатии последовательность не монотонна.
"""


# %%
def plot_epsilons(grid, n_merges=2000):
    tree, _ = QuadTree.build(grid)
    twigs = TwigList(tree)

    epsilons = []
    while twigs and len(epsilons) < n_merges:
        twig = twigs.pop()
        epsilons.append(twig.node.epsilon())
        twigs.merge(twig)

    _, ax = plt.subplots()
    ax.plot(epsilons)
    ax.set_xlabel("Merge", fontsize=16)
    ax.set_ylabel("Epsilon", fontsize=16)
    plt.show()


plot_epsilons(camera)

# %%
"""
## Построим график качества
Качество измеряется по PSNR (в децибелах), степень сжатия -- доля оставшихся узлов.
"""

# %%
camera_results = rho_sweep(camera, max_value=255)
camera_results

# %%
plot_sweep(camera_results)

# %%
"""
Чем меньше `rho`, тем больше веток нужно свернуть и тем дольше идет сжатие.
"""

# %%
camera_results[["rho", "n_nodes", "time"]]
