from typing import List, Protocol

from models.geo import LatLng
from models.zone import Coordinate

COORDINATE_PRECISION = 6  # ~0.1 m


class PathLike(Protocol):
    def get_length(self) -> int: ...

    def get_at(self, index: int) -> LatLng: ...


def extract_coordinates(path: PathLike, precision: int = COORDINATE_PRECISION) -> List[Coordinate]:
    """Ordered {latitude, longitude} list for an SDK path.

    A last point equal to the first (the drawing tool closing the ring) is
    dropped so the vertex count is not inflated by one.
    """
    length = path.get_length()
    if length > 1 and path.get_at(length - 1) == path.get_at(0):
        length -= 1
    coords: List[Coordinate] = []
    for i in range(length):
        p = path.get_at(i)
        coords.append(
            Coordinate(latitude=round(p.lat, precision), longitude=round(p.lng, precision))
        )
    return coords
