"""Tests for mirror reflection, touching and clamping in mirror.py"""

from __future__ import annotations

import pytest

from mirror_engine.mirror import (
    absolute_to_relative,
    constrain_piece_position,
    detect_mirror_collision,
    get_distance_to_mirror,
    get_position_touching_mirror,
    is_piece_touching_mirror,
    reflect_piece_across_mirror,
    relative_to_absolute,
)
from mirror_engine.shapes import get_piece_bounding_box
from mirror_engine.types import GameAreaConfig, MirrorRelativePosition, PiecePosition

CONFIG = GameAreaConfig(width=700, height=500, mirror_line_x=700, piece_size=100)

ROTATIONS = [0, 45, 90, 135, 180, 225, 270, 315]


class TestReflection:
    def test_formula(self):
        """Reflection moves x to 2M - x - piece_size and keeps the rest."""
        piece = PiecePosition(type="A", face="back", x=150, y=80, rotation=45)
        reflected = reflect_piece_across_mirror(CONFIG, piece)
        assert reflected.x == 2 * 700 - 150 - 100
        assert reflected.y == 80
        assert reflected.rotation == 45
        assert reflected.face == "back"

    def test_type_is_preserved(self):
        """Reflection keeps the piece type."""
        for piece_type in ("A", "B"):
            piece = PiecePosition(type=piece_type, x=10, y=10)
            assert reflect_piece_across_mirror(CONFIG, piece).type == piece_type

    @pytest.mark.parametrize("x", [0.0, 123.5, 600.0, 700.0])
    def test_involution(self, x):
        """Reflecting twice returns the original x."""
        piece = PiecePosition(type="B", x=x, y=40, rotation=270)
        twice = reflect_piece_across_mirror(
            CONFIG, reflect_piece_across_mirror(CONFIG, piece)
        )
        assert twice.x == pytest.approx(x)

    def test_reflected_bbox_mirrors_original(self):
        """The reflected bbox mirrors the original about the line."""
        piece = PiecePosition(type="A", x=300, y=100, rotation=135)
        bbox = get_piece_bounding_box(CONFIG, piece)
        rbox = get_piece_bounding_box(CONFIG, reflect_piece_across_mirror(CONFIG, piece))
        assert rbox.left == pytest.approx(2 * 700 - bbox.right)
        assert rbox.right == pytest.approx(2 * 700 - bbox.left)


class TestTouchingMirror:
    @pytest.mark.parametrize("piece_type", ["A", "B"])
    @pytest.mark.parametrize("rotation", ROTATIONS)
    def test_round_trip(self, piece_type, rotation):
        """The touching position touches without crossing."""
        x, y = get_position_touching_mirror(CONFIG, 200, rotation, piece_type)
        assert y == 200
        piece = PiecePosition(type=piece_type, x=x, y=y, rotation=rotation)
        assert is_piece_touching_mirror(CONFIG, piece)
        assert not detect_mirror_collision(CONFIG, piece)
        assert get_piece_bounding_box(CONFIG, piece).right == pytest.approx(700)

    def test_tolerance(self):
        """Touching allows a 5-unit gap."""
        x, y = get_position_touching_mirror(CONFIG, 100, 0, "A")
        assert is_piece_touching_mirror(CONFIG, PiecePosition(x=x - 4.9, y=y))
        assert not is_piece_touching_mirror(CONFIG, PiecePosition(x=x - 5.5, y=y))

    def test_distance_to_mirror(self):
        """Distance is the gap from bbox to mirror."""
        x, y = get_position_touching_mirror(CONFIG, 100, 90, "B")
        piece = PiecePosition(type="B", x=x - 30, y=y, rotation=90)
        assert get_distance_to_mirror(CONFIG, piece) == pytest.approx(30)


class TestMirrorCollision:
    def test_crossing_detected(self):
        """One unit past the mirror is a collision."""
        x, y = get_position_touching_mirror(CONFIG, 100, 45, "A")
        assert detect_mirror_collision(CONFIG, PiecePosition(x=x + 1, y=y, rotation=45))

    def test_sub_tolerance_crossing_ignored(self):
        """A fraction of a unit past the mirror is allowed."""
        x, y = get_position_touching_mirror(CONFIG, 100, 45, "A")
        assert not detect_mirror_collision(
            CONFIG, PiecePosition(x=x + 0.2, y=y, rotation=45)
        )


class TestConstrain:
    def test_inside_piece_unchanged(self):
        """A piece already inside is returned as is."""
        piece = PiecePosition(x=200, y=200)
        assert constrain_piece_position(CONFIG, piece, 700, 500) == piece

    def test_clamps_right_and_bottom(self):
        """Overhangs right and below are pulled back."""
        piece = PiecePosition(x=600, y=450)
        clamped = constrain_piece_position(CONFIG, piece, 700, 500)
        assert clamped.x == pytest.approx(490)
        assert clamped.y == pytest.approx(354)

    def test_clamps_left_and_top(self):
        """Overhangs left and above are pushed in."""
        clamped = constrain_piece_position(CONFIG, PiecePosition(x=-50, y=-50), 700, 500)
        bbox = get_piece_bounding_box(CONFIG, clamped)
        assert bbox.left == pytest.approx(0)
        assert bbox.top == pytest.approx(0)

    def test_mirror_is_optional(self):
        """The mirror limit applies only when asked."""
        config = GameAreaConfig(width=1000, height=500, mirror_line_x=700, piece_size=100)
        piece = PiecePosition(x=600, y=200)
        assert constrain_piece_position(config, piece, 1000, 500, respect_mirror=False) == piece
        clamped = constrain_piece_position(config, piece, 1000, 500)
        assert get_piece_bounding_box(config, clamped).right == pytest.approx(700)


class TestMirrorRelative:
    def test_zero_offset_touches_mirror_at_centre(self):
        """Zero offsets touch the mirror at mid height."""
        rel = MirrorRelativePosition(type="B", x=0, y=0, rotation=90)
        piece = relative_to_absolute(CONFIG, rel)
        assert piece.y == 250
        assert is_piece_touching_mirror(CONFIG, piece)

    @pytest.mark.parametrize("rotation", [0, 45, 225])
    def test_round_trip(self, rotation):
        """Absolute to relative and back is lossless."""
        piece = PiecePosition(type="A", face="back", x=310, y=120, rotation=rotation)
        back = relative_to_absolute(CONFIG, absolute_to_relative(CONFIG, piece))
        assert back.x == pytest.approx(piece.x)
        assert back.y == pytest.approx(piece.y)
        assert (back.type, back.face, back.rotation) == ("A", "back", rotation)

    def test_positive_offset_is_past_touching(self):
        """A positive x offset pushes the piece into the mirror by that much."""
        rel = MirrorRelativePosition(type="A", x=30, y=-50, rotation=90)
        piece = relative_to_absolute(CONFIG, rel)
        assert get_distance_to_mirror(CONFIG, piece) == pytest.approx(-30)
        assert detect_mirror_collision(CONFIG, piece)
        assert absolute_to_relative(CONFIG, piece).x == pytest.approx(30)

    def test_offsets_keep_sign_on_both_sides(self):
        """Offsets on either side of touching invert exactly."""
        for x in (-120.0, -0.5, 0.0, 0.5, 40.0):
            rel = MirrorRelativePosition(type="B", x=x, y=10, rotation=135)
            assert absolute_to_relative(
                CONFIG, relative_to_absolute(CONFIG, rel)
            ).x == pytest.approx(x)
