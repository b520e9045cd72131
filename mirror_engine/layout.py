"""Initial layout of unplaced pieces in the storage tray.

Pieces are laid out row-major on a grid of equal cells. A cell is the
rotation-0 bounding box of the largest requested piece type plus
``spacing``, and each piece's bounding box is centred in its cell, so
neighbouring pieces are always ``spacing`` apart.
"""

from __future__ import annotations

import logging

from .collision import do_pieces_overlap
from .shapes import get_piece_bounding_box
from .types import GameAreaConfig, PiecePosition, PositioningArea, PositioningResult

logger = logging.getLogger(__name__)

DEFAULT_SPACING = 20.0


def _failure(message: str) -> PositioningResult:
    logger.debug("layout failed: %s", message)
    return PositioningResult(success=False, error=message)


def _cell_size(
    config: GameAreaConfig, piece_types: list[str], spacing: float
) -> tuple[float, float]:
    width = 0.0
    height = 0.0
    for piece_type in set(piece_types):
        bbox = get_piece_bounding_box(config, PiecePosition(type=piece_type))
        width = max(width, bbox.width)
        height = max(height, bbox.height)
    return width + spacing, height + spacing


def position_pieces(
    config: GameAreaConfig,
    num_pieces: int,
    area: PositioningArea,
    piece_types: list[str],
    spacing: float = DEFAULT_SPACING,
) -> PositioningResult:
    """Place ``num_pieces`` non-overlapping pieces inside ``area``.

    Domain failures are reported through ``PositioningResult.error``.
    """
    if num_pieces <= 0:
        return _failure("Number of pieces must be greater than 0")
    if len(piece_types) != num_pieces:
        return _failure("piece_types length must match num_pieces")
    min_side = config.piece_size + spacing
    if area.width < min_side or area.height < min_side:
        return _failure("Area too small")

    cell_w, cell_h = _cell_size(config, piece_types, spacing)
    cols = int(area.width // cell_w)
    rows = int(area.height // cell_h)
    half = config.piece_size / 2

    placed: list[PiecePosition] = []
    cells = ((row, col) for row in range(rows) for col in range(cols))
    for piece_type in piece_types:
        for row, col in cells:
            cx = area.x + col * cell_w + cell_w / 2
            cy = area.y + row * cell_h + cell_h / 2
            candidate = PiecePosition(
                type=piece_type, face="front", x=cx - half, y=cy - half, rotation=0
            )
            if any(do_pieces_overlap(config, candidate, p) for p in placed):
                continue
            placed.append(candidate)
            break
        else:
            return _failure(
                f"Not enough space for {num_pieces} pieces in area "
                f"{area.width:g}x{area.height:g}"
            )

    return PositioningResult(success=True, positions=placed)
