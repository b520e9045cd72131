"""Challenge-card validity and placement checks.

A challenge card is valid when its pieces form one connected cluster that
touches the mirror, stays inside the play area, never crosses the mirror,
and overlaps neither itself nor its own reflection.

A level is solved when the placed pieces form a valid card that matches the
challenge card's pattern up to a shift of the whole pattern.
"""

from __future__ import annotations

import logging
import math

from .collision import do_pieces_overlap, do_pieces_touch
from .mirror import (
    detect_mirror_collision,
    is_piece_touching_mirror,
    reflect_piece_across_mirror,
)
from .shapes import get_piece_bounding_box, normalize_rotation
from .types import (
    ChallengeCard,
    GameAreaConfig,
    PiecePosition,
    PlacementCheck,
    Point,
    SolutionCheck,
    ValidationResult,
)

logger = logging.getLogger(__name__)

AREA_EPSILON = 1e-6
SOLUTION_POSITION_TOLERANCE = 20.0
SOLUTION_ROTATION_TOLERANCE = 5.0


def is_piece_in_game_area(config: GameAreaConfig, piece: PiecePosition) -> bool:
    bbox = get_piece_bounding_box(config, piece)
    return bbox.is_within(0.0, 0.0, config.width, config.height, AREA_EPSILON)


class _DisjointSet:
    def __init__(self, n: int) -> None:
        self.parent = list(range(n))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int) -> None:
        ra = self.find(a)
        rb = self.find(b)
        if ra != rb:
            self.parent[rb] = ra


def find_connected_groups(
    config: GameAreaConfig, pieces: list[PiecePosition]
) -> list[list[int]]:
    """Indices of pieces grouped by touch-connectivity, in first-seen order."""
    ds = _DisjointSet(len(pieces))
    for i in range(len(pieces)):
        for j in range(i + 1, len(pieces)):
            if do_pieces_touch(config, pieces[i], pieces[j]):
                ds.union(i, j)

    groups: dict[int, list[int]] = {}
    for i in range(len(pieces)):
        groups.setdefault(ds.find(i), []).append(i)
    return list(groups.values())


def _any_pair_overlaps(
    config: GameAreaConfig, pieces: list[PiecePosition]
) -> bool:
    for i in range(len(pieces)):
        for j in range(i + 1, len(pieces)):
            if do_pieces_overlap(config, pieces[i], pieces[j]):
                return True
    return False


def _any_reflection_overlaps(
    config: GameAreaConfig, pieces: list[PiecePosition]
) -> bool:
    reflections = [reflect_piece_across_mirror(config, p) for p in pieces]
    for piece in pieces:
        for reflected in reflections:
            if do_pieces_overlap(config, piece, reflected):
                return True
    return False


def validate_challenge_card(
    config: GameAreaConfig, pieces: list[PiecePosition]
) -> ValidationResult:
    if not pieces:
        return ValidationResult(
            is_valid=False,
            touches_mirror=False,
            has_piece_overlaps=False,
            has_reflection_overlaps=False,
            enters_mirror=False,
            pieces_connected=False,
            pieces_in_area=False,
        )

    pieces_in_area = all(is_piece_in_game_area(config, p) for p in pieces)
    enters_mirror = any(detect_mirror_collision(config, p) for p in pieces)
    touches_mirror = any(is_piece_touching_mirror(config, p) for p in pieces)
    has_piece_overlaps = _any_pair_overlaps(config, pieces)
    has_reflection_overlaps = _any_reflection_overlaps(config, pieces)
    pieces_connected = len(find_connected_groups(config, pieces)) == 1

    is_valid = (
        pieces_in_area
        and touches_mirror
        and not has_piece_overlaps
        and not has_reflection_overlaps
        and not enters_mirror
        and pieces_connected
    )
    result = ValidationResult(
        is_valid=is_valid,
        touches_mirror=touches_mirror,
        has_piece_overlaps=has_piece_overlaps,
        has_reflection_overlaps=has_reflection_overlaps,
        enters_mirror=enters_mirror,
        pieces_connected=pieces_connected,
        pieces_in_area=pieces_in_area,
    )
    logger.debug("validated %d pieces: %s", len(pieces), result)
    return result


def can_place_piece_at(
    config: GameAreaConfig,
    piece: PiecePosition,
    other_pieces: list[PiecePosition],
) -> PlacementCheck:
    boundary_collision = not is_piece_in_game_area(config, piece)
    mirror_collision = detect_mirror_collision(config, piece)
    piece_collisions = any(
        do_pieces_overlap(config, piece, other) for other in other_pieces
    )
    return PlacementCheck(
        can_place=not (boundary_collision or mirror_collision or piece_collisions),
        boundary_collision=boundary_collision,
        mirror_collision=mirror_collision,
        piece_collisions=piece_collisions,
    )


def _rotation_difference(a: float, b: float) -> float:
    diff = abs(normalize_rotation(a) - normalize_rotation(b))
    return min(diff, 360.0 - diff)


def _centred(pieces: list[PiecePosition]) -> list[Point]:
    mx = sum(p.x for p in pieces) / len(pieces)
    my = sum(p.y for p in pieces) / len(pieces)
    return [(p.x - mx, p.y - my) for p in pieces]


def _failure_reason(result: ValidationResult) -> str:
    if not result.pieces_connected:
        return "Pieces must be connected to each other"
    if not result.touches_mirror:
        return "At least one piece must touch the mirror"
    if result.has_piece_overlaps:
        return "Pieces must not overlap"
    if result.enters_mirror:
        return "Pieces must not cross the mirror"
    if result.has_reflection_overlaps:
        return "Pieces must not overlap their reflections"
    return "Pieces must stay inside the play area"


def check_solution(
    config: GameAreaConfig, placed: list[PiecePosition], card: ChallengeCard
) -> SolutionCheck:
    """Whether ``placed`` reproduces the pattern of ``card``.

    The placed pieces must first form a valid card. Both sets are then
    compared with their mean position moved to the origin, so the pattern
    may sit anywhere along the mirror. Each card piece is matched to an
    unused placed piece of the same type and face, preferring the closest
    rotation and then the closest position, and must agree within
    ``SOLUTION_POSITION_TOLERANCE`` and ``SOLUTION_ROTATION_TOLERANCE``.
    """
    if len(placed) != card.pieces_needed:
        return SolutionCheck(
            is_solved=False,
            reason=f"Place {card.pieces_needed} pieces; {len(placed)} placed",
        )
    if not placed:
        return SolutionCheck(is_solved=False, reason="No pieces placed")

    validation = validate_challenge_card(config, placed)
    if not validation.is_valid:
        return SolutionCheck(
            is_solved=False, reason=_failure_reason(validation), validation=validation
        )

    placed_offsets = _centred(placed)
    target_offsets = _centred(card.pieces)
    used = [False] * len(placed)
    for target, (tx, ty) in zip(card.pieces, target_offsets):
        best = None
        best_key = None
        for j, piece in enumerate(placed):
            if used[j] or piece.type != target.type or piece.face != target.face:
                continue
            px, py = placed_offsets[j]
            key = (
                _rotation_difference(piece.rotation, target.rotation),
                math.hypot(px - tx, py - ty),
            )
            if best_key is None or key < best_key:
                best, best_key = j, key
        if best is None:
            return SolutionCheck(
                is_solved=False,
                reason=f"Missing piece {target.type} ({target.face})",
                validation=validation,
            )
        used[best] = True
        rotation_diff, position_diff = best_key
        if rotation_diff > SOLUTION_ROTATION_TOLERANCE:
            return SolutionCheck(
                is_solved=False,
                reason=f"Piece {target.type} needs a different rotation",
                validation=validation,
            )
        if position_diff > SOLUTION_POSITION_TOLERANCE:
            return SolutionCheck(
                is_solved=False,
                reason=f"Piece {target.type} is not where the pattern needs it",
                validation=validation,
            )

    logger.debug("challenge %s solved", card.id)
    return SolutionCheck(is_solved=True, reason="Solved", validation=validation)
