"""Random valid challenge cards.

Each attempt builds a cluster outward from the mirror:

  1. the first piece gets a random type, face, rotation and height and is
     put flush against the mirror;
  2. every further piece starts well clear of a random piece already in the
     cluster, on its side away from the mirror, and is slid back along the
     line between their centres until the outlines meet;
  3. the cluster is kept only if ``validate_challenge_card`` accepts it.

All randomness comes from one ``random.Random`` seeded by the caller, so a
seed always yields the same card.
"""

from __future__ import annotations

import logging
import math
import random

from .alignment import align_flush, align_to_mirror
from .shapes import get_piece_center
from .types import (
    PIECE_FACES,
    PIECE_TYPES,
    ChallengeCard,
    GameAreaConfig,
    PiecePosition,
)
from .validation import validate_challenge_card

logger = logging.getLogger(__name__)

ROTATIONS = (0, 45, 90, 135, 180, 225, 270, 315)
MIN_PIECES = 1
MAX_PIECES = 4
FIRST_RANDOM_ID = 100

# Two outlines never overlap once their centres are this many piece sizes
# apart.
_START_DISTANCE = 4.0


def _random_piece(rng: random.Random, x: float, y: float) -> PiecePosition:
    return PiecePosition(
        type=rng.choice(PIECE_TYPES),
        face=rng.choice(PIECE_FACES),
        x=x,
        y=y,
        rotation=rng.choice(ROTATIONS),
    )


def _attach(
    config: GameAreaConfig, rng: random.Random, base: PiecePosition
) -> PiecePosition | None:
    """A new random piece pulled flush against ``base`` from its far side."""
    angle = math.radians(rng.uniform(90.0, 270.0))
    reach = _START_DISTANCE * config.piece_size
    bx, by = get_piece_center(config, base)
    half = config.piece_size / 2
    start = _random_piece(
        rng,
        bx + reach * math.cos(angle) - half,
        by + reach * math.sin(angle) - half,
    )
    sx, sy = get_piece_center(config, start)
    return align_flush(config, start, base, (bx - sx, by - sy), max_travel=reach)


def _build_cluster(
    config: GameAreaConfig, rng: random.Random, pieces_count: int
) -> list[PiecePosition] | None:
    margin = config.piece_size / 2
    y = rng.uniform(margin, max(margin, config.height - config.piece_size - margin))
    pieces = [align_to_mirror(config, _random_piece(rng, 0.0, y))]
    for _ in range(pieces_count - 1):
        piece = _attach(config, rng, rng.choice(pieces))
        if piece is None:
            return None
        pieces.append(piece)
    return pieces


def generate_random_challenge(
    config: GameAreaConfig,
    pieces_count: int = 2,
    seed: int = 0,
    max_attempts: int = 100,
) -> ChallengeCard | None:
    """A random valid challenge card, or None if no attempt produced one.

    ``pieces_count`` is clamped to 1..4. The card id is ``100 + attempt``.
    """
    pieces_count = max(MIN_PIECES, min(MAX_PIECES, pieces_count))
    rng = random.Random(seed)

    for attempt in range(max_attempts):
        pieces = _build_cluster(config, rng, pieces_count)
        if pieces is None:
            continue
        if not validate_challenge_card(config, pieces).is_valid:
            continue
        card_id = FIRST_RANDOM_ID + attempt
        logger.debug("random challenge found after %d attempts", attempt + 1)
        return ChallengeCard(
            id=card_id,
            name=f"Random challenge #{card_id}",
            pieces=pieces,
            description=f"Random challenge with {pieces_count} pieces",
            difficulty="easy" if pieces_count <= 2 else "intermediate",
        )

    logger.warning(
        "no valid random challenge with %d pieces after %d attempts",
        pieces_count,
        max_attempts,
    )
    return None
