"""
scheduler.py - max-priority queue of leaf regions waiting to be refined

Entries are ordered by score (highest first), then by area (largest first),
then by insertion order, so equal inputs always pop in the same order.
Regions that cannot be split are never queued.
"""

import heapq
import itertools
import math


class RefinementScheduler:
    def __init__(self):
        self._heap = []
        self._seq = itertools.count()

    def __len__(self):
        return len(self._heap)

    def is_empty(self):
        return not self._heap

    def push(self, index, region):
        """Queue a leaf; returns False if the region is terminal and was skipped."""
        if not region.can_split():
            return False
        if math.isnan(region.score):
            raise ValueError(f"Region {index} has an undefined score")
        heapq.heappush(self._heap, (-region.score, -region.area, next(self._seq), index))
        return True

    def pop_max(self):
        if not self._heap:
            raise IndexError("pop from an empty scheduler")
        return heapq.heappop(self._heap)[-1]

    def peek(self):
        if not self._heap:
            return None
        return self._heap[0][-1]
