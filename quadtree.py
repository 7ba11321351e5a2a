"""
quadtree.py - region nodes and the arena that owns them

Nodes live in a flat list and refer to their children by index. A node is a
leaf until it is split; splitting never removes nodes, so indices stay valid
for the lifetime of the tree.
"""

import numpy as np

ROOT = 0


def split_rect(x0, y0, x1, y1):
    """Bisect a rectangle at its midpoints.

    The first half of an odd side gets the floor, the second the remainder.
    A side of length 1 is left whole, so strips give two children and a
    single pixel gives none. Children come back NW, NE, SW, SE.
    """
    w, h = x1 - x0, y1 - y0
    if w <= 1 and h <= 1:
        return []
    xs = (x0, x1) if w == 1 else (x0, x0 + w // 2, x1)
    ys = (y0, y1) if h == 1 else (y0, y0 + h // 2, y1)
    return [(xa, ya, xb, yb)
            for ya, yb in zip(ys, ys[1:])
            for xa, xb in zip(xs, xs[1:])]


class Region:
    __slots__ = ("x0", "y0", "x1", "y1", "depth", "mean", "variance", "score", "children")

    def __init__(self, x0, y0, x1, y1, table, depth=0):
        self.x0, self.y0, self.x1, self.y1 = x0, y0, x1, y1
        self.depth = depth
        self.children = []
        self.mean, self.variance, self.score = table.mean_and_variance(x0, y0, x1, y1)

    @property
    def rect(self):
        return self.x0, self.y0, self.x1, self.y1

    @property
    def width(self):
        return self.x1 - self.x0

    @property
    def height(self):
        return self.y1 - self.y0

    @property
    def area(self):
        return self.width * self.height

    @property
    def is_leaf(self):
        return not self.children

    def can_split(self):
        return self.width > 1 or self.height > 1

    def __repr__(self):
        kind = "leaf" if self.is_leaf else "internal"
        return f"Region({self.x0}, {self.y0}, {self.x1}, {self.y1}, depth={self.depth}, {kind})"


class QuadTree:
    def __init__(self, table):
        self.table = table
        self.nodes = [Region(0, 0, table.width, table.height, table)]

    @property
    def root(self):
        return self.nodes[ROOT]

    @property
    def width(self):
        return self.table.width

    @property
    def height(self):
        return self.table.height

    def __len__(self):
        return len(self.nodes)

    def __getitem__(self, index):
        return self.nodes[index]

    def split(self, index):
        """Replace leaf `index` by its children; return the new child indices.

        Children are appended to the arena before the parent is linked to
        them, so the leaf set never shows a half-split node.
        """
        node = self.nodes[index]
        if not node.is_leaf:
            raise ValueError(f"Region {index} is already split")

        children = []
        for rect in split_rect(*node.rect):
            self.nodes.append(Region(*rect, self.table, depth=node.depth + 1))
            children.append(len(self.nodes) - 1)
        node.children = children
        return children

    def leaves(self, index=ROOT):
        """Leaf indices under `index`, depth first in NW, NE, SW, SE order."""
        node = self.nodes[index]
        if node.is_leaf:
            return [index]
        leaves = []
        for child in node.children:
            leaves.extend(self.leaves(child))
        return leaves

    def leaf_regions(self):
        return [self.nodes[i] for i in self.leaves()]

    def coverage(self):
        """(H, W) count of how many leaves cover each pixel."""
        counts = np.zeros((self.height, self.width), dtype=np.int32)
        for r in self.leaf_regions():
            counts[r.y0:r.y1, r.x0:r.x1] += 1
        return counts

    def check_partition(self):
        counts = self.coverage()
        if not (counts == 1).all():
            gaps = int((counts == 0).sum())
            overlaps = int((counts > 1).sum())
            raise ValueError(f"Leaf set is not a partition: {gaps} uncovered, {overlaps} overlapping pixels")
        return True

    def to_records(self):
        """Plain-data dump of the arena, one dict per node."""
        return [
            {
                "index": i,
                "rect": node.rect,
                "depth": node.depth,
                "children": list(node.children),
                "mean": [float(m) for m in node.mean],
                "score": float(node.score),
            }
            for i, node in enumerate(self.nodes)
        ]
