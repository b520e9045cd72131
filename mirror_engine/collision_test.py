"""Tests for adjacency, overlap and distance in collision.py"""

from __future__ import annotations

import math

import numpy as np
import pytest

from mirror_engine.collision import (
    do_pieces_overlap,
    do_pieces_overlap_significantly,
    do_pieces_touch,
    find_compatible_edges,
    get_min_distance_between_pieces,
    get_overlap_area,
    get_penetration_depth,
    get_piece_edges,
    polygon_distance,
    polygons_cross,
    sat_overlap_depth,
)
from mirror_engine.types import GameAreaConfig, PiecePosition

CONFIG = GameAreaConfig(width=700, height=500, mirror_line_x=700, piece_size=100)

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def _square_at(x: float, y: float, size: float = 1.0):
    return [(x + px * size, y + py * size) for px, py in UNIT_SQUARE]


def _stacked(gap: float) -> tuple[PiecePosition, PiecePosition]:
    """A upright above an A turned half way round, flat edges facing.

    The upright piece's flat bottom edge and the turned piece's flat top
    edge overlap across 192 units of x; ``gap`` is the vertical clearance
    (negative for interpenetration).
    """
    upper = PiecePosition(type="A", x=200, y=100, rotation=0)
    lower = PiecePosition(type="A", x=200, y=100 + 192 + gap, rotation=180)
    return upper, lower


class TestOutlineHelpers:
    def test_distance_between_squares(self):
        """Side-by-side squares are separated by their gap."""
        assert polygon_distance(_square_at(0, 0), _square_at(3, 0)) == pytest.approx(2.0)

    def test_distance_to_offset_corner(self):
        """Diagonally offset squares measure corner to corner."""
        assert polygon_distance(_square_at(0, 0), _square_at(4, 5)) == pytest.approx(5.0)

    def test_distance_vertex_to_edge_interior(self):
        """A vertex facing the middle of an edge measures perpendicular."""
        diamond = [(5.0, 0.5), (6.0, -0.5), (7.0, 0.5), (6.0, 1.5)]
        assert polygon_distance(_square_at(0, 0), diamond) == pytest.approx(4.0)

    def test_distance_accepts_arrays(self):
        """Numpy outlines give the same result as lists."""
        a = np.array(_square_at(0, 0))
        b = np.array(_square_at(0, 3))
        assert polygon_distance(a, b) == pytest.approx(2.0)

    def test_crossing_outlines_have_zero_distance(self):
        """Overlapping squares cross and report zero distance."""
        assert polygons_cross(_square_at(0, 0), _square_at(0.5, 0.5))
        assert polygon_distance(_square_at(0, 0), _square_at(0.5, 0.5)) == 0.0

    def test_shared_edge_does_not_cross(self):
        """Squares sharing an edge touch without crossing."""
        assert not polygons_cross(_square_at(0, 0), _square_at(1, 0))
        assert polygon_distance(_square_at(0, 0), _square_at(1, 0)) == 0.0

    def test_contained_outline_does_not_cross(self):
        """A square inside another has no crossing edges."""
        assert not polygons_cross(_square_at(0, 0, 4), _square_at(1, 1))


class TestSatOverlapDepth:
    def test_overlapping_squares(self):
        """Squares overlapping by a quarter report depth 0.25."""
        assert sat_overlap_depth(_square_at(0, 0), _square_at(0.75, 0)) == pytest.approx(
            0.25
        )

    def test_touching_squares_have_no_depth(self):
        """Squares sharing an edge have zero depth."""
        assert sat_overlap_depth(_square_at(0, 0), _square_at(1, 0)) == 0.0

    def test_separated_squares(self):
        """Distant squares have zero depth."""
        assert sat_overlap_depth(_square_at(0, 0), _square_at(5, 5)) == 0.0


class TestPieceOverlap:
    def test_identical_pieces_overlap(self):
        """A piece fully overlaps itself."""
        p = PiecePosition(type="B", x=200, y=200, rotation=45)
        assert do_pieces_overlap(CONFIG, p, p)
        assert do_pieces_overlap_significantly(CONFIG, p, p)
        assert get_min_distance_between_pieces(CONFIG, p, p) == 0.0

    def test_shallow_overlap_is_not_significant(self):
        """A 2-unit overlap counts as overlap but not as significant."""
        upper, lower = _stacked(-2)
        assert get_penetration_depth(CONFIG, upper, lower) == pytest.approx(2.0)
        assert do_pieces_overlap(CONFIG, upper, lower)
        assert not do_pieces_overlap_significantly(CONFIG, upper, lower)

    def test_deep_overlap_is_significant(self):
        """A 20-unit overlap is significant and not touching."""
        upper, lower = _stacked(-20)
        assert do_pieces_overlap_significantly(CONFIG, upper, lower)
        assert not do_pieces_touch(CONFIG, upper, lower)

    def test_far_apart_pieces(self):
        """Distant pieces have no depth and a large distance."""
        p1 = PiecePosition(type="A", x=0, y=0)
        p2 = PiecePosition(type="B", x=450, y=300, rotation=90)
        assert get_penetration_depth(CONFIG, p1, p2) == 0.0
        assert not do_pieces_overlap(CONFIG, p1, p2)
        assert get_min_distance_between_pieces(CONFIG, p1, p2) > 100

    def test_overlap_area(self):
        """Shared area is the full piece for itself and zero when apart."""
        p = PiecePosition(type="B", x=200, y=200, rotation=45)
        assert get_overlap_area(CONFIG, p, p) == pytest.approx(2 * 128 * 128)
        upper, lower = _stacked(-20)
        assert get_overlap_area(CONFIG, upper, lower) > 0
        upper, lower = _stacked(10)
        assert get_overlap_area(CONFIG, upper, lower) == 0.0


class TestTouching:
    def test_shared_edge_touches(self):
        """Flat edges laid together touch without overlapping."""
        upper, lower = _stacked(0)
        assert not do_pieces_overlap(CONFIG, upper, lower)
        assert do_pieces_touch(CONFIG, upper, lower)
        assert get_min_distance_between_pieces(CONFIG, upper, lower) < 1e-6

    def test_gap_distance_is_exact(self):
        """A 10-unit gap measures 10 and does not touch."""
        upper, lower = _stacked(10)
        assert get_min_distance_between_pieces(CONFIG, upper, lower) == pytest.approx(
            10.0
        )
        assert not do_pieces_touch(CONFIG, upper, lower)

    def test_gap_within_tolerance_touches(self):
        """A 1.5-unit gap is within the touch tolerance."""
        upper, lower = _stacked(1.5)
        assert do_pieces_touch(CONFIG, upper, lower)

    def test_diagonal_glue_touches(self):
        """Pieces glued along a diagonal edge touch."""
        target = PiecePosition(type="A", x=490, y=200)
        moving = PiecePosition(type="A", x=362, y=72)
        assert not do_pieces_overlap(CONFIG, moving, target)
        assert do_pieces_touch(CONFIG, moving, target)


class TestEdges:
    def test_outline_has_seven_edges(self):
        """Seven unit-direction edges sum to the outline perimeter."""
        edges = get_piece_edges(CONFIG, PiecePosition(type="B", x=100, y=100, rotation=45))
        assert len(edges) == 7
        perimeter = sum(e.length for e in edges)
        assert perimeter == pytest.approx(256 + 384 * math.sqrt(2))
        for e in edges:
            assert math.hypot(*e.direction) == pytest.approx(1.0)

    def test_compatible_edges_sorted_and_antiparallel(self):
        """Pairs are antiparallel, equal length and closest first."""
        moving = PiecePosition(type="A", x=112, y=112)
        target = PiecePosition(type="A", x=250, y=250)
        pairs = find_compatible_edges(CONFIG, moving, target)
        assert pairs
        distances = [p.distance for p in pairs]
        assert distances == sorted(distances)
        for p in pairs:
            dot = (
                p.moving.direction[0] * p.target.direction[0]
                + p.moving.direction[1] * p.target.direction[1]
            )
            assert dot <= -0.99
            assert p.moving.length == pytest.approx(p.target.length, abs=1.0)

        closest = pairs[0]
        assert closest.translation[0] == pytest.approx(10.0)
        assert closest.translation[1] == pytest.approx(10.0)
        assert closest.distance == pytest.approx(10 * math.sqrt(2))

    def test_same_rotation_pairs_both_diagonal_edges(self):
        """Same-rotation pieces pair up on both diagonal edges."""
        moving = PiecePosition(type="A", x=100, y=100)
        target = PiecePosition(type="A", x=400, y=300)
        assert len(find_compatible_edges(CONFIG, moving, target)) == 2

    def test_no_compatible_edges_gives_empty_list(self):
        """A 45-degree turn leaves no antiparallel pair."""
        moving = PiecePosition(type="A", x=100, y=100)
        target = PiecePosition(type="A", x=400, y=300, rotation=45)
        assert find_compatible_edges(CONFIG, moving, target) == []
