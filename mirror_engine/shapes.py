"""Piece shape model: from (type, rotation, x, y) to a world-space polygon.

Every piece is the same outline: a unit square with three unit
right-triangles attached to its left, top and right sides. In unit space
(y up) the outline is::

    (0,0) (1,0) (2,0) (2.5,0.5) (2,1) (1.5,1.5) (1,1)

scaled by ``piece_size * UNIT_SCALE``. The square and the triangles are also
kept as separate convex parts; ``collision.py`` measures overlap depth part
by part because the outline itself is concave.

Placing a piece runs a single pipeline for every type and rotation:

  1. flip to screen space (y down), and for type B mirror horizontally;
     the B outline is reversed so every outline keeps the same winding,
     which ``collision.find_compatible_edges`` relies on;
  2. centre the outline on its bounding-box centre and rotate it by the
     piece rotation;
  3. re-centre the rotated outline on its own bounding-box centre, so the
     bounding box of a placed piece is always centred on the rotation centre
     ``(x + piece_size/2, y + piece_size/2)``;
  4. translate to that rotation centre.

Steps 1-3 depend only on ``(type, rotation, piece_size)`` and are cached as
read-only arrays; per-call work is one vector addition.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache

import numpy as np

from .types import BoundingBox, GameAreaConfig, PiecePosition, Point

UNIT_SCALE = 1.28

OUTLINE_UNITS: tuple[Point, ...] = (
    (0.0, 0.0),
    (1.0, 0.0),
    (2.0, 0.0),
    (2.5, 0.5),
    (2.0, 1.0),
    (1.5, 1.5),
    (1.0, 1.0),
)

PART_UNITS: dict[str, tuple[Point, ...]] = {
    "square": ((1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0)),
    "left_triangle": ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)),
    "top_triangle": ((1.0, 1.0), (2.0, 1.0), (1.5, 1.5)),
    "right_triangle": ((2.0, 0.0), (2.5, 0.5), (2.0, 1.0)),
}


@dataclass(frozen=True)
class LocalShape:
    """Rotated piece geometry centred on the origin (screen space)."""

    outline: np.ndarray
    parts: tuple[np.ndarray, ...]
    half_width: float
    half_height: float


def normalize_rotation(rotation: float) -> float:
    """Map any angle in degrees into [0, 360)."""
    r = float(rotation) % 360.0
    # -1e-18 % 360 rounds to 360.0
    return 0.0 if r >= 360.0 else r


def _to_screen(points: tuple[Point, ...], unit: float, mirrored: bool) -> np.ndarray:
    pts = np.array(points, dtype=np.float64) * unit
    pts[:, 1] = -pts[:, 1]
    if mirrored:
        pts[:, 0] = -pts[:, 0]
    return pts


def _bbox_center(points: np.ndarray) -> np.ndarray:
    return (points.min(axis=0) + points.max(axis=0)) / 2


def transform_polygon(
    vertices: np.ndarray,
    cx: float,
    cy: float,
    rot_rad: float,
) -> np.ndarray:
    """Rotate local-space vertices about the origin and translate to (cx, cy)."""
    cos_r = math.cos(rot_rad)
    sin_r = math.sin(rot_rad)
    rot = np.array([[cos_r, sin_r], [-sin_r, cos_r]])
    return vertices @ rot + np.array([cx, cy])


def _screen_geometry(
    piece_type: str, piece_size: float
) -> tuple[np.ndarray, list[np.ndarray]]:
    """Unrotated outline and parts, both centred on the outline's bounding box."""
    unit = piece_size * UNIT_SCALE
    mirrored = piece_type == "B"
    outline = _to_screen(OUTLINE_UNITS, unit, mirrored)
    if mirrored:
        outline = outline[::-1]
    center = _bbox_center(outline)
    parts = [_to_screen(part, unit, mirrored) - center for part in PART_UNITS.values()]
    return outline - center, parts


def local_outline(piece_type: str, piece_size: float) -> np.ndarray:
    """Unrotated outline for a piece type, centred on its bounding box."""
    outline, _ = _screen_geometry(piece_type, piece_size)
    return outline


@lru_cache(maxsize=256)
def _local_shape(piece_type: str, rotation: float, piece_size: float) -> LocalShape:
    outline, raw_parts = _screen_geometry(piece_type, piece_size)
    rot_rad = math.radians(rotation)

    outline = transform_polygon(outline, 0.0, 0.0, rot_rad)
    recenter = _bbox_center(outline)
    outline = outline - recenter
    outline.setflags(write=False)

    parts = []
    for part in raw_parts:
        pts = transform_polygon(part, 0.0, 0.0, rot_rad) - recenter
        pts.setflags(write=False)
        parts.append(pts)

    half = outline.max(axis=0)
    return LocalShape(
        outline=outline,
        parts=tuple(parts),
        half_width=float(half[0]),
        half_height=float(half[1]),
    )


def get_local_shape(config: GameAreaConfig, piece: PiecePosition) -> LocalShape:
    return _local_shape(
        piece.type, normalize_rotation(piece.rotation), float(config.piece_size)
    )


def get_piece_center(config: GameAreaConfig, piece: PiecePosition) -> Point:
    """Rotation centre of a piece; also the centre of its bounding box."""
    half = config.piece_size / 2
    return (piece.x + half, piece.y + half)


def get_piece_vertices(config: GameAreaConfig, piece: PiecePosition) -> np.ndarray:
    """World-space outline, shape (7, 2), consistent winding for both types."""
    cx, cy = get_piece_center(config, piece)
    return get_local_shape(config, piece).outline + np.array([cx, cy])


def get_piece_parts(
    config: GameAreaConfig, piece: PiecePosition
) -> list[np.ndarray]:
    """World-space convex parts (square and three triangles)."""
    cx, cy = get_piece_center(config, piece)
    offset = np.array([cx, cy])
    return [part + offset for part in get_local_shape(config, piece).parts]


def get_piece_bounding_box(
    config: GameAreaConfig, piece: PiecePosition
) -> BoundingBox:
    shape = get_local_shape(config, piece)
    cx, cy = get_piece_center(config, piece)
    return BoundingBox(
        left=cx - shape.half_width,
        right=cx + shape.half_width,
        top=cy - shape.half_height,
        bottom=cy + shape.half_height,
    )
