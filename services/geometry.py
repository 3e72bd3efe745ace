from typing import List, Sequence, Tuple

from models.zone import Coordinate

Point = Tuple[float, float]  # (lng, lat), i.e. (x, y)


def _xy(coords: Sequence[Coordinate]) -> List[Point]:
    return [(c.longitude, c.latitude) for c in coords]


def point_inside_polygon(px: float, py: float, poly: Sequence[Point]) -> bool:
    # Ray casting; inclusive on edges
    inside = False
    n = len(poly)
    for i in range(n):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % n]
        if (y1 > py) != (y2 > py):
            xin = (x2 - x1) * (py - y1) / (y2 - y1 + 1e-12) + x1
            if px <= xin:
                inside = not inside
    return inside


def _orientation(a: Point, b: Point, c: Point) -> int:
    val = (b[1] - a[1]) * (c[0] - b[0]) - (b[0] - a[0]) * (c[1] - b[1])
    if abs(val) < 1e-15:
        return 0
    return 1 if val > 0 else 2


def _on_segment(a: Point, b: Point, c: Point) -> bool:
    return (
        min(a[0], c[0]) <= b[0] <= max(a[0], c[0])
        and min(a[1], c[1]) <= b[1] <= max(a[1], c[1])
    )


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    o1 = _orientation(p1, q1, p2)
    o2 = _orientation(p1, q1, q2)
    o3 = _orientation(p2, q2, p1)
    o4 = _orientation(p2, q2, q1)
    if o1 != o2 and o3 != o4:
        return True
    # collinear cases
    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, q2, q1):
        return True
    if o3 == 0 and _on_segment(p2, p1, q2):
        return True
    if o4 == 0 and _on_segment(p2, q1, q2):
        return True
    return False


def _edges(pts: Sequence[Point]) -> List[Tuple[Point, Point]]:
    return [(pts[i], pts[(i + 1) % len(pts)]) for i in range(len(pts))]


def _collapse_repeats(pts: Sequence[Point]) -> List[Point]:
    ring: List[Point] = []
    for p in pts:
        if not ring or p != ring[-1]:
            ring.append(p)
    while len(ring) > 1 and ring[-1] == ring[0]:
        ring.pop()
    return ring


def is_simple_polygon(coords: Sequence[Coordinate]) -> bool:
    """True when no two non-adjacent edges of the closed ring touch.

    Repeated consecutive vertices are collapsed first; they add a zero-length
    edge, not a crossing.
    """
    pts = _collapse_repeats(_xy(coords))
    n = len(pts)
    if n < 3:
        return False
    edges = _edges(pts)
    for i in range(n):
        for j in range(i + 1, n):
            # adjacent edges share a vertex; first and last edge are adjacent too
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if segments_intersect(*edges[i], *edges[j]):
                return False
    return True


def polygons_overlap(a: Sequence[Coordinate], b: Sequence[Coordinate]) -> bool:
    pa, pb = _xy(a), _xy(b)
    if len(pa) < 3 or len(pb) < 3:
        return False
    for e1 in _edges(pa):
        for e2 in _edges(pb):
            if segments_intersect(*e1, *e2):
                return True
    # no crossing edges: overlap only if one ring sits inside the other
    return point_inside_polygon(*pa[0], pb) or point_inside_polygon(*pb[0], pa)
