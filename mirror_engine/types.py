"""Data types for the mirror puzzle geometry engine.

Every value here is a snapshot: the engine never keeps references to them
between calls and never mutates them. Piece identity, "placed" flags and
persistence belong to the application that owns the piece lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

PIECE_TYPES = ("A", "B")
PIECE_FACES = ("front", "back")
SNAP_TYPES = ("grid", "piece", "mirror", "none")

Point = tuple[float, float]


@dataclass(frozen=True)
class GameAreaConfig:
    width: float
    height: float
    mirror_line_x: float
    piece_size: float

    def __post_init__(self) -> None:
        for name in ("width", "height", "mirror_line_x", "piece_size"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value!r}")

    @staticmethod
    def from_dict(d: dict) -> GameAreaConfig:
        return GameAreaConfig(
            width=d["width"],
            height=d["height"],
            mirror_line_x=d.get("mirror_line_x", d["width"]),
            piece_size=d.get("piece_size", 100.0),
        )

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "mirror_line_x": self.mirror_line_x,
            "piece_size": self.piece_size,
        }


DEFAULT_GAME_AREA = GameAreaConfig(
    width=700.0, height=600.0, mirror_line_x=700.0, piece_size=100.0
)


@dataclass(frozen=True)
class PiecePosition:
    type: str = "A"
    face: str = "front"
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0

    def __post_init__(self) -> None:
        if self.type not in PIECE_TYPES:
            raise ValueError(f"Unknown piece type: {self.type!r}")
        if self.face not in PIECE_FACES:
            raise ValueError(f"Unknown piece face: {self.face!r}")

    def moved_to(self, x: float, y: float) -> PiecePosition:
        return replace(self, x=x, y=y)

    def moved_by(self, dx: float, dy: float) -> PiecePosition:
        return replace(self, x=self.x + dx, y=self.y + dy)

    @staticmethod
    def from_dict(d: dict) -> PiecePosition:
        return PiecePosition(
            type=d.get("type", "A"),
            face=d.get("face", "front"),
            x=d.get("x", 0.0),
            y=d.get("y", 0.0),
            rotation=d.get("rotation", 0.0),
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "face": self.face,
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
        }


@dataclass(frozen=True)
class BoundingBox:
    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return (
            (self.left + self.right) / 2,
            (self.top + self.bottom) / 2,
        )

    def intersects(self, other: BoundingBox) -> bool:
        """True if the interiors overlap. Shared edges do not count."""
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )

    def is_within(
        self,
        left: float,
        top: float,
        right: float,
        bottom: float,
        tolerance: float = 0.0,
    ) -> bool:
        return (
            self.left >= left - tolerance
            and self.top >= top - tolerance
            and self.right <= right + tolerance
            and self.bottom <= bottom + tolerance
        )


@dataclass(frozen=True)
class Edge:
    start: Point
    end: Point
    direction: Point
    length: float

    @property
    def midpoint(self) -> Point:
        return (
            (self.start[0] + self.end[0]) / 2,
            (self.start[1] + self.end[1]) / 2,
        )


@dataclass(frozen=True)
class EdgePair:
    """An edge of the moving piece that can be glued onto a target edge.

    ``translation`` moves the moving edge's midpoint onto the target edge's
    midpoint; ``distance`` is its length.
    """

    moving: Edge
    target: Edge
    translation: Point
    distance: float


@dataclass
class ValidationResult:
    is_valid: bool
    touches_mirror: bool
    has_piece_overlaps: bool
    has_reflection_overlaps: bool
    enters_mirror: bool
    pieces_connected: bool
    pieces_in_area: bool

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "touches_mirror": self.touches_mirror,
            "has_piece_overlaps": self.has_piece_overlaps,
            "has_reflection_overlaps": self.has_reflection_overlaps,
            "enters_mirror": self.enters_mirror,
            "pieces_connected": self.pieces_connected,
            "pieces_in_area": self.pieces_in_area,
        }


@dataclass
class SolutionCheck:
    """Outcome of comparing placed pieces against a challenge card."""

    is_solved: bool
    reason: str
    validation: ValidationResult | None = None

    def to_dict(self) -> dict:
        d: dict = {"is_solved": self.is_solved, "reason": self.reason}
        if self.validation is not None:
            d["validation"] = self.validation.to_dict()
        return d


@dataclass
class PlacementCheck:
    can_place: bool
    boundary_collision: bool
    mirror_collision: bool
    piece_collisions: bool


@dataclass(frozen=True)
class SnapConfig:
    base_grid_size: float = 10.0
    snap_distance: float = 60.0
    mirror_snap_distance: float = 20.0
    enable_intelligent_snap: bool = True

    def __post_init__(self) -> None:
        if not self.base_grid_size > 0:
            raise ValueError(
                f"base_grid_size must be positive, got {self.base_grid_size!r}"
            )
        if self.snap_distance < 0 or self.mirror_snap_distance < 0:
            raise ValueError("snap distances must not be negative")

    @staticmethod
    def from_dict(d: dict | None) -> SnapConfig:
        if not d:
            return SnapConfig()
        return SnapConfig(
            base_grid_size=d.get("base_grid_size", 10.0),
            snap_distance=d.get("snap_distance", 60.0),
            mirror_snap_distance=d.get("mirror_snap_distance", 20.0),
            enable_intelligent_snap=d.get("enable_intelligent_snap", True),
        )


@dataclass
class SnapResult:
    x: float
    y: float
    snapped: bool
    snap_type: str
    adjustment: Point = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.snap_type not in SNAP_TYPES:
            raise ValueError(f"Unknown snap type: {self.snap_type!r}")

    @staticmethod
    def unsnapped(piece: PiecePosition) -> SnapResult:
        return SnapResult(
            x=piece.x, y=piece.y, snapped=False, snap_type="none"
        )

    @staticmethod
    def snapped_to(
        piece: PiecePosition, x: float, y: float, snap_type: str
    ) -> SnapResult:
        return SnapResult(
            x=x,
            y=y,
            snapped=True,
            snap_type=snap_type,
            adjustment=(x - piece.x, y - piece.y),
        )

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "snapped": self.snapped,
            "snap_type": self.snap_type,
            "adjustment": {"x": self.adjustment[0], "y": self.adjustment[1]},
        }


@dataclass(frozen=True)
class PositioningArea:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class PositioningResult:
    success: bool
    positions: list[PiecePosition] = field(default_factory=list)
    error: str | None = None


@dataclass
class ChallengeCard:
    id: int
    name: str
    pieces: list[PiecePosition] = field(default_factory=list)
    description: str = ""
    difficulty: str = ""

    @property
    def pieces_needed(self) -> int:
        return len(self.pieces)

    @staticmethod
    def from_dict(d: dict) -> ChallengeCard:
        return ChallengeCard(
            id=d["id"],
            name=d.get("name", f"Challenge {d['id']}"),
            pieces=[PiecePosition.from_dict(p) for p in d.get("pieces", [])],
            description=d.get("description", ""),
            difficulty=d.get("difficulty", ""),
        )

    def to_dict(self) -> dict:
        d: dict = {
            "id": self.id,
            "name": self.name,
            "pieces_needed": self.pieces_needed,
            "pieces": [p.to_dict() for p in self.pieces],
        }
        if self.description:
            d["description"] = self.description
        if self.difficulty:
            d["difficulty"] = self.difficulty
        return d


@dataclass(frozen=True)
class MirrorRelativePosition:
    """Piece position expressed relative to the mirror.

    ``x`` is the horizontal offset from the position at which the piece
    would touch the mirror (0 = touching, negative = further left). ``y`` is
    the offset of the piece's top-left from the vertical centre of the play
    area.
    """

    type: str = "A"
    face: str = "front"
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0

    @staticmethod
    def from_dict(d: dict) -> MirrorRelativePosition:
        return MirrorRelativePosition(
            type=d.get("type", "A"),
            face=d.get("face", "front"),
            x=d.get("x", 0.0),
            y=d.get("y", 0.0),
            rotation=d.get("rotation", 0.0),
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "face": self.face,
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
        }
