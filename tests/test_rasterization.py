from __future__ import annotations

import math
import random

from gridmap_sim.gridmap import trace_cells


def test_horizontal_segment() -> None:
    assert trace_cells((0.5, 0.5), (0.5, 3.5)) == [(0, 0), (0, 1), (0, 2), (0, 3)]
    assert trace_cells((0.5, 3.5), (0.5, 0.5)) == [(0, 3), (0, 2), (0, 1), (0, 0)]


def test_same_cell_segment() -> None:
    assert trace_cells((2.2, 2.3), (2.9, 2.1)) == [(2, 2)]
    assert trace_cells((4.0, 4.0), (4.0, 4.0)) == [(4, 4)]


def test_corner_crossing_visits_both_side_cells() -> None:
    cells = trace_cells((0.5, 0.5), (2.5, 2.5))
    assert cells[0] == (0, 0)
    assert cells[-1] == (2, 2)
    assert set(cells) == {(0, 0), (0, 1), (1, 0), (1, 1), (1, 2), (2, 1), (2, 2)}
    # Side cells of a corner are diagonal neighbours of each other
    assert cells[1:3] == [(1, 0), (0, 1)]
    for (r0, c0), (r1, c1) in zip(cells, cells[1:]):
        assert max(abs(r1 - r0), abs(c1 - c0)) == 1


def test_random_segments_have_no_gaps() -> None:
    rng = random.Random(3)
    for _ in range(300):
        start = (rng.uniform(-20.0, 20.0), rng.uniform(-20.0, 20.0))
        end = (rng.uniform(-20.0, 20.0), rng.uniform(-20.0, 20.0))
        cells = trace_cells(start, end)

        assert cells[0] == (math.floor(start[0]), math.floor(start[1]))
        assert cells[-1] == (math.floor(end[0]), math.floor(end[1]))
        # A generic segment crosses one boundary per step
        expected = 1 + abs(cells[-1][0] - cells[0][0]) + abs(cells[-1][1] - cells[0][1])
        assert len(cells) == expected
        for (r0, c0), (r1, c1) in zip(cells, cells[1:]):
            assert abs(r1 - r0) + abs(c1 - c0) == 1

        # Every cell the segment passes through is on the path
        visited = set(cells)
        for i in range(401):
            t = i / 400.0
            r = start[0] + t * (end[0] - start[0])
            c = start[1] + t * (end[1] - start[1])
            assert (math.floor(r), math.floor(c)) in visited
