"""
compressor.py - greedy refinement loop

Initialized -> Running -> Done. Each step pops the leaf with the largest
squared error, splits it and queues the children that can still be split.
"""

import enum

import numpy as np

from prefix_sums import PrefixSumTable
from quadtree import QuadTree, ROOT
from scheduler import RefinementScheduler
import render


class State(enum.Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    DONE = "done"


class Compressor:
    def __init__(self, raster):
        raster = np.asarray(raster)
        self.table = PrefixSumTable(raster)
        self.tree = QuadTree(self.table)
        self.scheduler = RefinementScheduler()
        self.scheduler.push(ROOT, self.tree.root)
        self.state = State.INITIALIZED
        self.iteration = 0

    def step(self) -> bool:
        """Do one split. Returns False once every leaf is terminal."""
        if self.state is State.DONE:
            return False
        if self.scheduler.is_empty():
            self.state = State.DONE
            return False

        self.state = State.RUNNING
        index = self.scheduler.pop_max()
        for child in self.tree.split(index):
            self.scheduler.push(child, self.tree[child])
        self.iteration += 1
        return True

    def run(self, iterations, sampler=None):
        """Spend up to `iterations` splits; returns how many were done.

        A zero or negative budget leaves the root as the only leaf. The
        optional sampler sees the tree after iteration 0 and after every
        completed split.
        """
        if sampler is not None:
            sampler.observe(self.iteration, self.tree)
        for _ in range(max(0, int(iterations))):
            if not self.step():
                break
            if sampler is not None:
                sampler.observe(self.iteration, self.tree)
        self.state = State.DONE
        if sampler is not None:
            sampler.finish(self.iteration, self.tree)
        return self.iteration

    def leaves(self):
        return self.tree.leaf_regions()

    def total_error(self) -> float:
        return float(sum(r.score for r in self.leaves()))

    def render(self, outline=None):
        return render.render_leaves(self.tree, outline=outline)
