"""Flush auto-placement for challenge authoring.

Hand-placed pieces are rarely exactly flush: a few units of gap break
connectivity and a few units of overlap break validity. These helpers push
pieces until they just meet the mirror or a neighbour.
"""

from __future__ import annotations

import logging
import math

from .collision import do_pieces_overlap
from .mirror import get_distance_to_mirror, get_position_touching_mirror
from .shapes import get_piece_center
from .types import GameAreaConfig, PiecePosition, Point

logger = logging.getLogger(__name__)

FLUSH_BISECTION_STEPS = 30
DEFAULT_MAX_TRAVEL = 400.0


def align_to_mirror(config: GameAreaConfig, piece: PiecePosition) -> PiecePosition:
    x, y = get_position_touching_mirror(config, piece.y, piece.rotation, piece.type)
    return piece.moved_to(x, y)


def align_flush(
    config: GameAreaConfig,
    moving: PiecePosition,
    target: PiecePosition,
    direction: Point,
    max_travel: float = DEFAULT_MAX_TRAVEL,
    steps: int = FLUSH_BISECTION_STEPS,
) -> PiecePosition | None:
    """Slide ``moving`` along ``direction`` until it meets ``target``.

    Marches in steps of a quarter piece size to find the first overlapping
    position, then bisects ``steps`` times back to the last overlap-free
    one. Returns None if ``moving`` already overlaps ``target`` or never
    reaches it within ``max_travel``.
    """
    length = math.hypot(direction[0], direction[1])
    if length == 0:
        return None
    ux = direction[0] / length
    uy = direction[1] / length

    def overlaps_at(s: float) -> bool:
        return do_pieces_overlap(config, moving.moved_by(ux * s, uy * s), target)

    if overlaps_at(0.0):
        return None

    step = config.piece_size / 4
    lo = 0.0
    hi = None
    while lo < max_travel:
        s = min(lo + step, max_travel)
        if overlaps_at(s):
            hi = s
            break
        lo = s
    if hi is None:
        return None

    for _ in range(steps):
        mid = (lo + hi) / 2
        if overlaps_at(mid):
            hi = mid
        else:
            lo = mid
    return moving.moved_by(ux * lo, uy * lo)


def align_challenge(
    config: GameAreaConfig, pieces: list[PiecePosition]
) -> list[PiecePosition]:
    """Put the piece nearest the mirror against it, then pull the rest flush.

    Pieces are pulled in order of distance to the already aligned set, each
    toward the centre of its nearest aligned neighbour. A piece that cannot
    be made flush keeps its position.
    """
    if not pieces:
        return []

    result = list(pieces)
    first = min(
        range(len(pieces)),
        key=lambda i: abs(get_distance_to_mirror(config, pieces[i])),
    )
    result[first] = align_to_mirror(config, pieces[first])
    aligned = [first]
    pending = [i for i in range(len(pieces)) if i != first]

    def centre_distance(i: int, j: int) -> float:
        ax, ay = get_piece_center(config, result[i])
        bx, by = get_piece_center(config, result[j])
        return math.hypot(bx - ax, by - ay)

    while pending:
        i, j = min(
            ((i, j) for i in pending for j in aligned),
            key=lambda ij: centre_distance(*ij),
        )
        pending.remove(i)
        aligned.append(i)

        ax, ay = get_piece_center(config, result[i])
        bx, by = get_piece_center(config, result[j])
        flush = align_flush(
            config,
            result[i],
            result[j],
            (bx - ax, by - ay),
            max_travel=math.hypot(bx - ax, by - ay),
        )
        if flush is None:
            logger.debug("piece %d could not be made flush against %d", i, j)
            continue
        result[i] = flush
    return result
