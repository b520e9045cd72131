#!/usr/bin/env python3
"""Validate every challenge card in a challenge file.

Usage (from the repo root):
    python scripts/validate_challenges.py challenges.json
    python scripts/validate_challenges.py challenges.json --width 800 --height 600
    python scripts/validate_challenges.py challenges.json -v      # debug logging

Exits with status 1 if any challenge is invalid.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add repo root to path
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from mirror_engine.challenge_io import (  # noqa: E402
    document_game_area,
    load_challenges_dict,
    parse_challenges,
    validate_challenges,
)
from mirror_engine.collision import get_overlap_area  # noqa: E402
from mirror_engine.types import DEFAULT_GAME_AREA, GameAreaConfig  # noqa: E402

FLAGS = (
    "pieces_in_area",
    "touches_mirror",
    "enters_mirror",
    "has_piece_overlaps",
    "has_reflection_overlaps",
    "pieces_connected",
)


def _config_from_args(args, data: dict) -> GameAreaConfig:
    config = document_game_area(data) or DEFAULT_GAME_AREA
    overrides = {
        "width": args.width,
        "height": args.height,
        "mirror_line_x": args.mirror,
        "piece_size": args.piece_size,
    }
    d = config.to_dict()
    d.update({k: v for k, v in overrides.items() if v is not None})
    return GameAreaConfig.from_dict(d)


def _worst_overlap(config: GameAreaConfig, card) -> float:
    pieces = card.pieces
    return max(
        (
            get_overlap_area(config, pieces[i], pieces[j])
            for i in range(len(pieces))
            for j in range(i + 1, len(pieces))
        ),
        default=0.0,
    )


def main():
    parser = argparse.ArgumentParser(description="Validate challenge cards")
    parser.add_argument("path", type=Path, help="Challenge JSON file")
    parser.add_argument("--width", type=float, help="Play area width")
    parser.add_argument("--height", type=float, help="Play area height")
    parser.add_argument("--mirror", type=float, help="Mirror line x")
    parser.add_argument("--piece-size", type=float, help="Piece size")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        data = load_challenges_dict(args.path)
        config = _config_from_args(args, data)
        cards = parse_challenges({**data, "game_area": config.to_dict()})
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    failures = 0
    for card, result in validate_challenges(config, cards):
        status = "ok" if result.is_valid else "INVALID"
        print(f"[{status}] {card.id}: {card.name} ({card.pieces_needed} pieces)")
        if not result.is_valid:
            failures += 1
            for flag in FLAGS:
                print(f"    {flag}: {getattr(result, flag)}")
            if result.has_piece_overlaps:
                print(f"    worst overlap area: {_worst_overlap(config, card):.1f}")

    print()
    print(f"{len(cards) - failures}/{len(cards)} challenges valid")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
