"""Mirror line geometry: reflection, touching, collision and clamping.

The mirror is the vertical line ``x = config.mirror_line_x``. Pieces live to
its left; the game draws each one again on the right. Reflection keeps the
piece type: the piece's own type already encodes the handedness of its
mirror image.

Also converts between absolute positions and mirror-relative ones, where x
is measured from the position at which the piece would touch the mirror
and y from the vertical centre of the play area. Challenge files authored
for one play-area size stay valid on another when stored that way.

The x offset is measured from the touching position on both sides of it:
a positive x is a piece pushed that far past touching, into the mirror.
The two conversions are exact inverses for every position.
"""

from __future__ import annotations

from dataclasses import replace

from .shapes import get_piece_bounding_box
from .types import GameAreaConfig, MirrorRelativePosition, PiecePosition, Point

MIRROR_TOUCH_TOLERANCE = 5.0
MIRROR_COLLISION_TOLERANCE = 0.25


def reflect_piece_across_mirror(
    config: GameAreaConfig, piece: PiecePosition
) -> PiecePosition:
    """Mirror image of a piece: x' = 2M - x - piece_size, y, type and rotation kept."""
    return replace(
        piece, x=2 * config.mirror_line_x - piece.x - config.piece_size
    )


def get_position_touching_mirror(
    config: GameAreaConfig, y: float, rotation: float, piece_type: str
) -> Point:
    """(x, y) at which the piece's bounding box ends exactly on the mirror."""
    trial = PiecePosition(type=piece_type, x=0.0, y=y, rotation=rotation)
    bbox = get_piece_bounding_box(config, trial)
    return (config.mirror_line_x - bbox.right, y)


def get_distance_to_mirror(config: GameAreaConfig, piece: PiecePosition) -> float:
    """Signed gap between the bounding box and the mirror; negative past it."""
    return config.mirror_line_x - get_piece_bounding_box(config, piece).right


def is_piece_touching_mirror(config: GameAreaConfig, piece: PiecePosition) -> bool:
    return abs(get_distance_to_mirror(config, piece)) <= MIRROR_TOUCH_TOLERANCE


def detect_mirror_collision(config: GameAreaConfig, piece: PiecePosition) -> bool:
    """True if the piece crosses into the mirror side."""
    bbox = get_piece_bounding_box(config, piece)
    return bbox.right > config.mirror_line_x + MIRROR_COLLISION_TOLERANCE


def constrain_piece_position(
    config: GameAreaConfig,
    piece: PiecePosition,
    area_width: float,
    area_height: float,
    respect_mirror: bool = True,
) -> PiecePosition:
    """Clamp a piece so its bounding box stays inside the area.

    With ``respect_mirror`` the right edge is also held at or left of the
    mirror. A piece larger than the area is pinned to the left/top edge.
    """
    bbox = get_piece_bounding_box(config, piece)
    right_limit = area_width
    if respect_mirror:
        right_limit = min(right_limit, config.mirror_line_x)

    dx = 0.0
    if bbox.right > right_limit:
        dx = right_limit - bbox.right
    if bbox.left + dx < 0:
        dx = -bbox.left

    dy = 0.0
    if bbox.bottom > area_height:
        dy = area_height - bbox.bottom
    if bbox.top + dy < 0:
        dy = -bbox.top

    if dx == 0 and dy == 0:
        return piece
    return piece.moved_by(dx, dy)


def relative_to_absolute(
    config: GameAreaConfig, rel: MirrorRelativePosition
) -> PiecePosition:
    y = config.height / 2 + rel.y
    touching_x, _ = get_position_touching_mirror(config, y, rel.rotation, rel.type)
    return PiecePosition(
        type=rel.type,
        face=rel.face,
        x=touching_x + rel.x,
        y=y,
        rotation=rel.rotation,
    )


def absolute_to_relative(
    config: GameAreaConfig, piece: PiecePosition
) -> MirrorRelativePosition:
    touching_x, _ = get_position_touching_mirror(
        config, piece.y, piece.rotation, piece.type
    )
    return MirrorRelativePosition(
        type=piece.type,
        face=piece.face,
        x=piece.x - touching_x,
        y=piece.y - config.height / 2,
        rotation=piece.rotation,
    )
