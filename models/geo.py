from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class LatLng:
    """A point as the map SDK represents it."""

    lat: float
    lng: float


@dataclass
class LatLngBounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, points: Iterable[LatLng]) -> Optional["LatLngBounds"]:
        bounds: Optional[LatLngBounds] = None
        for p in points:
            if bounds is None:
                bounds = cls(p.lat, p.lng, p.lat, p.lng)
            else:
                bounds.extend(p)
        return bounds

    def extend(self, p: LatLng) -> None:
        self.south = min(self.south, p.lat)
        self.north = max(self.north, p.lat)
        self.west = min(self.west, p.lng)
        self.east = max(self.east, p.lng)

    @property
    def center(self) -> LatLng:
        return LatLng((self.south + self.north) / 2, (self.west + self.east) / 2)
