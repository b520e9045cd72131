"""Load, save and batch-validate challenge cards as JSON.

A challenge file is either a bare list of challenge dicts or a document::

    {
      "game_area": {"width": 700, "height": 600, "mirror_line_x": 700,
                    "piece_size": 100},
      "coordinate_system": "mirror_relative",
      "challenges": [{"id": 1, "name": "...", "pieces": [...]}, ...]
    }

``game_area`` and ``coordinate_system`` are optional. With
``"coordinate_system": "mirror_relative"`` each piece's x is an offset from
its mirror-touching position and y an offset from the vertical centre of the
play area; pieces are converted to absolute positions on load and back
when saved that way.

Used by ``scripts/validate_challenges.py``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .mirror import absolute_to_relative, relative_to_absolute
from .types import (
    DEFAULT_GAME_AREA,
    ChallengeCard,
    GameAreaConfig,
    MirrorRelativePosition,
    ValidationResult,
)
from .validation import validate_challenge_card

logger = logging.getLogger(__name__)

MIRROR_RELATIVE = "mirror_relative"
ABSOLUTE = "absolute"


def load_challenges_dict(path: Path) -> dict:
    """Load a challenge file as a raw document dict.

    A bare list is wrapped as ``{"challenges": [...]}``. Raises ValueError
    if the top level is neither a list nor a dict with a ``challenges``
    list.
    """
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, list):
        return {"challenges": data}
    if not isinstance(data, dict) or not isinstance(data.get("challenges"), list):
        raise ValueError(
            f"{path}: expected a list of challenges or an object with a "
            f"'challenges' list"
        )
    return data


def document_game_area(data: dict) -> GameAreaConfig | None:
    """The ``game_area`` block of a challenge document, if it has one."""
    area = data.get("game_area")
    if area is None:
        return None
    try:
        return GameAreaConfig.from_dict(area)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid game_area: {e}") from e


def _card_from_dict(d: dict, config: GameAreaConfig, relative: bool) -> ChallengeCard:
    if not relative:
        return ChallengeCard.from_dict(d)
    card = ChallengeCard.from_dict({**d, "pieces": []})
    card.pieces = [
        relative_to_absolute(config, MirrorRelativePosition.from_dict(p))
        for p in d.get("pieces", [])
    ]
    return card


def parse_challenges(
    data: dict, config: GameAreaConfig | None = None
) -> list[ChallengeCard]:
    """Build ChallengeCards from a document dict.

    The document's own ``game_area`` takes precedence over ``config``.
    Raises ValueError naming the first malformed challenge.
    """
    config = document_game_area(data) or config or DEFAULT_GAME_AREA
    system = data.get("coordinate_system", ABSOLUTE)
    if system not in (ABSOLUTE, MIRROR_RELATIVE):
        raise ValueError(f"Unknown coordinate_system: {system!r}")

    cards = []
    for i, entry in enumerate(data["challenges"]):
        if not isinstance(entry, dict):
            raise ValueError(f"Challenge #{i} is not an object")
        if not isinstance(entry.get("pieces", []), list):
            raise ValueError(f"Challenge #{i}: 'pieces' must be a list")
        try:
            cards.append(_card_from_dict(entry, config, system == MIRROR_RELATIVE))
        except (KeyError, TypeError, ValueError) as e:
            label = entry.get("id", f"#{i}")
            raise ValueError(f"Invalid challenge {label}: {e}") from e
    return cards


def load_challenges(
    path: Path, config: GameAreaConfig | None = None
) -> list[ChallengeCard]:
    cards = parse_challenges(load_challenges_dict(path), config)
    logger.info("loaded %d challenges from %s", len(cards), path)
    return cards


def _card_to_dict(card: ChallengeCard, config: GameAreaConfig, relative: bool) -> dict:
    d = card.to_dict()
    if relative:
        d["pieces"] = [absolute_to_relative(config, p).to_dict() for p in card.pieces]
    return d


def save_challenges(
    cards: list[ChallengeCard],
    path: Path,
    game_area: GameAreaConfig | None = None,
    coordinate_system: str = ABSOLUTE,
) -> None:
    """Write challenge cards to a JSON file.

    With ``coordinate_system=MIRROR_RELATIVE`` pieces are stored as offsets
    from the mirror, measured in ``game_area`` (or the default game area).
    Creates parent directories if they don't exist.
    """
    if coordinate_system not in (ABSOLUTE, MIRROR_RELATIVE):
        raise ValueError(f"Unknown coordinate_system: {coordinate_system!r}")
    relative = coordinate_system == MIRROR_RELATIVE
    config = game_area or DEFAULT_GAME_AREA

    data: dict = {}
    if game_area is not None:
        data["game_area"] = game_area.to_dict()
    if relative:
        data["coordinate_system"] = MIRROR_RELATIVE
    data["challenges"] = [_card_to_dict(card, config, relative) for card in cards]
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def validate_challenges(
    config: GameAreaConfig, cards: list[ChallengeCard]
) -> list[tuple[ChallengeCard, ValidationResult]]:
    results = []
    for card in cards:
        result = validate_challenge_card(config, card.pieces)
        if not result.is_valid:
            logger.warning("challenge %s (%s) is not valid", card.id, card.name)
        results.append((card, result))
    return results
