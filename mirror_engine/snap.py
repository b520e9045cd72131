"""Drop-time snapping for a dragged piece.

Three tiers, tried in order; the first that produces a position wins:

  1. **Piece**: glue one of the moving piece's edges onto a compatible
     edge of a nearby piece, leaving a 1-unit gap along the edge normal so
     the result reads as touching without overlapping. When a nearby piece
     offers no compatible edge at all, slide along the centre line until
     the outlines meet instead.
  2. **Mirror**: a piece whose bounding box ends within
     ``mirror_snap_distance`` of the mirror is put exactly against it.
  3. **Grid**: round to ``base_grid_size``; if that spot is outside the
     play area or crosses the mirror, try the eight neighbouring grid
     points, closest to the drop position first.

If nothing applies the drop position is returned unchanged with
``snapped=False``. Every loop is bounded by the number of other pieces and
the fixed number of edges per piece.
"""

from __future__ import annotations

import logging
import math

from .alignment import align_flush
from .collision import do_pieces_overlap_significantly, find_compatible_edges
from .mirror import detect_mirror_collision, get_position_touching_mirror
from .shapes import get_piece_bounding_box, get_piece_center
from .types import (
    BoundingBox,
    EdgePair,
    GameAreaConfig,
    PiecePosition,
    SnapConfig,
    SnapResult,
)
from .validation import is_piece_in_game_area

logger = logging.getLogger(__name__)

EDGE_GAP = 1.0
PROXIMITY_BISECTION_STEPS = 24
PROXIMITY_FLUSH_STEPS = 12

_NEIGHBOUR_OFFSETS = [
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
]


def snap_to_grid_value(value: float, grid_size: float) -> float:
    """Round to the nearest multiple of ``grid_size``; halves round up."""
    return math.floor(value / grid_size + 0.5) * grid_size


def _bbox_gap(a: BoundingBox, b: BoundingBox) -> float:
    gx = max(0.0, b.left - a.right, a.left - b.right)
    gy = max(0.0, b.top - a.bottom, a.top - b.bottom)
    return math.hypot(gx, gy)


def _is_valid_drop(
    config: GameAreaConfig,
    candidate: PiecePosition,
    other_pieces: list[PiecePosition],
) -> bool:
    if not is_piece_in_game_area(config, candidate):
        return False
    if detect_mirror_collision(config, candidate):
        return False
    return not any(
        do_pieces_overlap_significantly(config, candidate, other)
        for other in other_pieces
    )


def _glue_offset(
    config: GameAreaConfig, piece: PiecePosition, pair: EdgePair
) -> tuple[float, float]:
    """Pair translation plus EDGE_GAP along the moving edge's inward normal."""
    dx, dy = pair.moving.direction
    nx, ny = -dy, dx
    cx, cy = get_piece_center(config, piece)
    mx, my = pair.moving.midpoint
    if nx * (cx - mx) + ny * (cy - my) < 0:
        nx, ny = -nx, -ny
    tx, ty = pair.translation
    return (tx + nx * EDGE_GAP, ty + ny * EDGE_GAP)


def _proximity_candidate(
    config: GameAreaConfig,
    piece: PiecePosition,
    target: PiecePosition,
    max_travel: float,
) -> PiecePosition | None:
    """Slide toward ``target`` along the centre line until the outlines meet.

    The bounding boxes are brought together by bisection first, then
    ``align_flush`` closes the remaining gap between the outlines. Returns
    None when the outlines cannot meet within ``max_travel``.
    """
    cx, cy = get_piece_center(config, piece)
    tx, ty = get_piece_center(config, target)
    dist = math.hypot(tx - cx, ty - cy)
    if dist == 0:
        return None
    ux = (tx - cx) / dist
    uy = (ty - cy) / dist

    lo = 0.0
    target_bbox = get_piece_bounding_box(config, target)
    if not get_piece_bounding_box(config, piece).intersects(target_bbox):
        hi = dist
        for _ in range(PROXIMITY_BISECTION_STEPS):
            mid = (lo + hi) / 2
            moved = get_piece_bounding_box(config, piece.moved_by(ux * mid, uy * mid))
            if moved.intersects(target_bbox):
                hi = mid
            else:
                lo = mid
    if lo >= max_travel:
        return None
    return align_flush(
        config,
        piece.moved_by(ux * lo, uy * lo),
        target,
        (ux, uy),
        max_travel=max_travel - lo,
        steps=PROXIMITY_FLUSH_STEPS,
    )


def _snap_to_pieces(
    config: GameAreaConfig,
    piece: PiecePosition,
    other_pieces: list[PiecePosition],
    snap_config: SnapConfig,
) -> SnapResult | None:
    bbox = get_piece_bounding_box(config, piece)
    reach = snap_config.snap_distance + EDGE_GAP
    for other in other_pieces:
        if _bbox_gap(bbox, get_piece_bounding_box(config, other)) > reach:
            continue

        pairs = find_compatible_edges(config, piece, other)
        if not pairs:
            candidate = _proximity_candidate(
                config, piece, other, snap_config.snap_distance
            )
            if candidate is None:
                continue
            moved = math.hypot(candidate.x - piece.x, candidate.y - piece.y)
            if moved <= snap_config.snap_distance and _is_valid_drop(
                config, candidate, other_pieces
            ):
                return SnapResult.snapped_to(piece, candidate.x, candidate.y, "piece")
            continue

        for pair in pairs:
            if pair.distance > reach:
                break
            ox, oy = _glue_offset(config, piece, pair)
            if math.hypot(ox, oy) > snap_config.snap_distance:
                continue
            candidate = piece.moved_by(ox, oy)
            if _is_valid_drop(config, candidate, other_pieces):
                return SnapResult.snapped_to(piece, candidate.x, candidate.y, "piece")
    return None


def _snap_to_mirror(
    config: GameAreaConfig, piece: PiecePosition, snap_config: SnapConfig
) -> SnapResult | None:
    bbox = get_piece_bounding_box(config, piece)
    if abs(bbox.right - config.mirror_line_x) > snap_config.mirror_snap_distance:
        return None
    x, y = get_position_touching_mirror(config, piece.y, piece.rotation, piece.type)
    return SnapResult.snapped_to(piece, x, y, "mirror")


def _grid_position_ok(config: GameAreaConfig, candidate: PiecePosition) -> bool:
    return is_piece_in_game_area(config, candidate) and not detect_mirror_collision(
        config, candidate
    )


def _snap_to_grid(
    config: GameAreaConfig, piece: PiecePosition, snap_config: SnapConfig
) -> SnapResult | None:
    g = snap_config.base_grid_size
    gx = snap_to_grid_value(piece.x, g)
    gy = snap_to_grid_value(piece.y, g)
    if _grid_position_ok(config, piece.moved_to(gx, gy)):
        return SnapResult.snapped_to(piece, gx, gy, "grid")

    neighbours = [(gx + dx * g, gy + dy * g) for dx, dy in _NEIGHBOUR_OFFSETS]
    neighbours.sort(key=lambda p: math.hypot(p[0] - piece.x, p[1] - piece.y))
    for nx, ny in neighbours:
        if _grid_position_ok(config, piece.moved_to(nx, ny)):
            return SnapResult.snapped_to(piece, nx, ny, "grid")
    return None


def calculate_snap_position(
    config: GameAreaConfig,
    piece: PiecePosition,
    other_pieces: list[PiecePosition],
    snap_config: SnapConfig | None = None,
) -> SnapResult:
    if snap_config is None:
        snap_config = SnapConfig()

    if snap_config.enable_intelligent_snap and other_pieces:
        result = _snap_to_pieces(config, piece, other_pieces, snap_config)
        if result is not None:
            logger.debug("piece snap %s -> (%.2f, %.2f)", piece, result.x, result.y)
            return result

    result = _snap_to_mirror(config, piece, snap_config)
    if result is not None:
        logger.debug("mirror snap %s -> (%.2f, %.2f)", piece, result.x, result.y)
        return result

    result = _snap_to_grid(config, piece, snap_config)
    if result is not None:
        return result

    logger.debug("no snap for %s", piece)
    return SnapResult.unsnapped(piece)
