"""Adjacency, overlap and distance tests between placed pieces.

The central question this module answers: "how do these two pieces sit
relative to each other?" Every higher layer (validation, snapping, layout,
alignment) reduces to the predicates here:

  * **Penetration depth**: how far two pieces interpenetrate. The piece
    outline is concave, so depth is measured on its convex parts (square
    plus three triangles) with the separating-axis theorem and the deepest
    part pair wins. Touching pieces have depth ~0.
  * **Overlap**: depth above ``OVERLAP_EPSILON``. Layout and validation
    use this. Snapping uses the looser ``SIGNIFICANT_OVERLAP_DEPTH`` so
    float noise after a glue move never rejects a candidate.
  * **Distance**: minimum Euclidean distance between outlines; 0 when
    they intersect. Computed corner-to-edge.
  * **Touching**: distance within ``TOUCH_TOLERANCE`` and not overlapping.
  * **Overlap area**: shared area of two outlines via shapely, for
    reporting how badly a card overlaps.
  * **Compatible edges**: edge pairs of equal length pointing in opposite
    directions. Every outline has the same winding, so two pieces glued
    along an edge traverse it in opposite directions.
"""

from __future__ import annotations

import math

import numpy as np
from shapely.geometry import Polygon as ShapelyPolygon

from .shapes import get_piece_bounding_box, get_piece_parts, get_piece_vertices
from .types import Edge, EdgePair, GameAreaConfig, PiecePosition

Polygon = list[tuple[float, float]]

OVERLAP_EPSILON = 0.5
SIGNIFICANT_OVERLAP_DEPTH = 3.0
TOUCH_TOLERANCE = 2.0
EDGE_LENGTH_TOLERANCE = 1.0
ANTIPARALLEL_COS = 0.99


def _as_array(poly: Polygon | np.ndarray) -> np.ndarray:
    return np.asarray(poly, dtype=np.float64)


def _cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]


def polygons_cross(poly_a: Polygon | np.ndarray, poly_b: Polygon | np.ndarray) -> bool:
    """True if any edge of A properly crosses any edge of B.

    Edges meeting at an endpoint, or running collinear, do not count, so
    two pieces sharing an edge never cross.
    """
    a = _as_array(poly_a)
    b = _as_array(poly_b)
    da = np.roll(a, -1, axis=0) - a
    db = np.roll(b, -1, axis=0) - b
    # (edges of A) x (edges of B)
    offsets = b[None, :, :] - a[:, None, :]
    denom = _cross(da[:, None, :], db[None, :, :])
    non_parallel = denom != 0.0
    safe_denom = np.where(non_parallel, denom, 1.0)
    ua = _cross(offsets, db[None, :, :]) / safe_denom
    ub = _cross(offsets, da[:, None, :]) / safe_denom
    crossing = non_parallel & (ua > 0) & (ua < 1) & (ub > 0) & (ub < 1)
    return bool(crossing.any())


def _vertex_to_outline_distance(points: np.ndarray, poly: np.ndarray) -> float:
    """Smallest distance from any of ``points`` to any edge of ``poly``."""
    starts = poly
    seg = np.roll(poly, -1, axis=0) - starts
    seg_len_sq = (seg**2).sum(axis=1)
    rel = points[:, None, :] - starts[None, :, :]
    t = (rel * seg[None, :, :]).sum(axis=2) / np.where(seg_len_sq > 0, seg_len_sq, 1.0)
    t = np.clip(t, 0.0, 1.0)
    nearest = starts[None, :, :] + t[..., None] * seg[None, :, :]
    gaps = points[:, None, :] - nearest
    return float(np.sqrt((gaps**2).sum(axis=2).min()))


def polygon_distance(poly_a: Polygon | np.ndarray, poly_b: Polygon | np.ndarray) -> float:
    """Minimum distance between two polygon outlines.

    Returns 0 if any pair of edges crosses. Otherwise the closest approach
    is always at a vertex of one outline, so it is the smaller of the two
    vertex-to-outline distances. Containment without crossing is not
    detected here; callers check penetration first.
    """
    a = _as_array(poly_a)
    b = _as_array(poly_b)
    if polygons_cross(a, b):
        return 0.0
    return min(_vertex_to_outline_distance(a, b), _vertex_to_outline_distance(b, a))


def _edges(poly: Polygon) -> list[tuple[tuple[float, float], tuple[float, float]]]:
    n = len(poly)
    return [(poly[i], poly[(i + 1) % n]) for i in range(n)]


def _project(poly: Polygon, ax: float, ay: float) -> tuple[float, float]:
    """Project vertices onto an axis, return (min, max)."""
    dots = [x * ax + y * ay for x, y in poly]
    return min(dots), max(dots)


def sat_overlap_depth(poly_a: Polygon, poly_b: Polygon) -> float:
    """Minimum overlap of two convex polygons over all separating axes.

    Returns 0 when a separating axis exists (including touching shapes).
    """
    depth = float("inf")
    for poly in (poly_a, poly_b):
        for (x1, y1), (x2, y2) in _edges(poly):
            ex = x2 - x1
            ey = y2 - y1
            length = math.hypot(ex, ey)
            if length == 0:
                continue
            ax = -ey / length
            ay = ex / length
            min_a, max_a = _project(poly_a, ax, ay)
            min_b, max_b = _project(poly_b, ax, ay)
            overlap = min(max_a, max_b) - max(min_a, min_b)
            if overlap <= 0:
                return 0.0
            depth = min(depth, overlap)
    return 0.0 if depth == float("inf") else depth


def _aabb(poly: Polygon) -> tuple[float, float, float, float]:
    xs = [p[0] for p in poly]
    ys = [p[1] for p in poly]
    return min(xs), min(ys), max(xs), max(ys)


def _aabbs_overlap(
    a: tuple[float, float, float, float], b: tuple[float, float, float, float]
) -> bool:
    return a[0] < b[2] and b[0] < a[2] and a[1] < b[3] and b[1] < a[3]


def get_penetration_depth(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> float:
    """Deepest SAT overlap over all pairs of convex parts of the two pieces."""
    bbox1 = get_piece_bounding_box(config, piece1)
    bbox2 = get_piece_bounding_box(config, piece2)
    if not bbox1.intersects(bbox2):
        return 0.0

    parts1 = [p.tolist() for p in get_piece_parts(config, piece1)]
    parts2 = [p.tolist() for p in get_piece_parts(config, piece2)]
    boxes2 = [_aabb(p) for p in parts2]
    depth = 0.0
    for part1 in parts1:
        box1 = _aabb(part1)
        for part2, box2 in zip(parts2, boxes2):
            if not _aabbs_overlap(box1, box2):
                continue
            depth = max(depth, sat_overlap_depth(part1, part2))
    return depth


def get_min_distance_between_pieces(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> float:
    """Minimum distance between the outlines; 0 when they intersect."""
    if get_penetration_depth(config, piece1, piece2) > 0:
        return 0.0
    return polygon_distance(
        get_piece_vertices(config, piece1),
        get_piece_vertices(config, piece2),
    )


def do_pieces_overlap(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> bool:
    return get_penetration_depth(config, piece1, piece2) > OVERLAP_EPSILON


def do_pieces_overlap_significantly(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> bool:
    return get_penetration_depth(config, piece1, piece2) > SIGNIFICANT_OVERLAP_DEPTH


def do_pieces_touch(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> bool:
    """Outlines within ``TOUCH_TOLERANCE`` of each other without overlapping."""
    if do_pieces_overlap(config, piece1, piece2):
        return False
    return get_min_distance_between_pieces(config, piece1, piece2) <= TOUCH_TOLERANCE


def get_piece_edges(config: GameAreaConfig, piece: PiecePosition) -> list[Edge]:
    verts = get_piece_vertices(config, piece)
    deltas = np.roll(verts, -1, axis=0) - verts
    lengths = np.hypot(deltas[:, 0], deltas[:, 1])
    edges = []
    for i in range(len(verts)):
        length = float(lengths[i])
        if length == 0:
            continue
        start = (float(verts[i, 0]), float(verts[i, 1]))
        end = (start[0] + float(deltas[i, 0]), start[1] + float(deltas[i, 1]))
        edges.append(
            Edge(
                start=start,
                end=end,
                direction=(float(deltas[i, 0]) / length, float(deltas[i, 1]) / length),
                length=length,
            )
        )
    return edges


def find_compatible_edges(
    config: GameAreaConfig, moving: PiecePosition, target: PiecePosition
) -> list[EdgePair]:
    """Edge pairs that could be glued, closest translation first.

    A pair qualifies when both edges have the same length (within
    ``EDGE_LENGTH_TOLERANCE``) and opposite directions.
    """
    pairs = []
    target_edges = get_piece_edges(config, target)
    for m in get_piece_edges(config, moving):
        mx, my = m.midpoint
        for t in target_edges:
            if abs(m.length - t.length) > EDGE_LENGTH_TOLERANCE:
                continue
            dot = m.direction[0] * t.direction[0] + m.direction[1] * t.direction[1]
            if dot > -ANTIPARALLEL_COS:
                continue
            tx, ty = t.midpoint
            dx = tx - mx
            dy = ty - my
            pairs.append(
                EdgePair(
                    moving=m,
                    target=t,
                    translation=(dx, dy),
                    distance=math.hypot(dx, dy),
                )
            )
    pairs.sort(key=lambda p: p.distance)
    return pairs


def get_overlap_area(
    config: GameAreaConfig, piece1: PiecePosition, piece2: PiecePosition
) -> float:
    """Area shared by the two piece outlines.

    Uses shapely's polygon intersection, which handles the concave outline
    directly. Intended for reports, not the per-frame checks above.
    """
    if not get_piece_bounding_box(config, piece1).intersects(
        get_piece_bounding_box(config, piece2)
    ):
        return 0.0
    poly1 = ShapelyPolygon(get_piece_vertices(config, piece1).tolist())
    poly2 = ShapelyPolygon(get_piece_vertices(config, piece2).tolist())
    return float(poly1.intersection(poly2).area)
