"""
Copyright 2026 greenhouse-waves authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
2-D points and segments in the vertical model plane.

x is the horizontal position and y the altitude, both in meters. Points double
as direction vectors. Segment crossings are computed with Shapely.
"""

import math
from typing import Dict, Optional
from shapely.geometry import Point as ShapelyPoint, LineString


class Point:
    """
    A position or a direction vector in the model plane.
    """
    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y

    @classmethod
    def from_shapely(cls, sp: ShapelyPoint) -> 'Point':
        return cls(sp.x, sp.y)

    def copy(self) -> 'Point':
        return Point(self.x, self.y)

    @property
    def magnitude(self) -> float:
        """Length of the point seen as a vector."""
        return math.hypot(self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'Point':
        return cls(d['x'], d['y'])

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"


class Line:
    """
    A finite segment between two points, used for a wave or a stretch of an
    atmosphere layer.
    """
    def __init__(self, p1: Point, p2: Point):
        self.p1 = p1
        self.p2 = p2

    def to_shapely(self) -> LineString:
        return LineString([(self.p1.x, self.p1.y), (self.p2.x, self.p2.y)])

    def __repr__(self) -> str:
        return f"Line({self.p1} -> {self.p2})"


class Geometry:
    """
    Vector helpers for placing waves and testing where they cross model elements.
    """

    @staticmethod
    def distance(p1: Point, p2: Point) -> float:
        return math.hypot(p2.x - p1.x, p2.y - p1.y)

    @staticmethod
    def rotate_vec(vector: Point, angle: float) -> Point:
        """
        Rotate a direction vector.

        Args:
            vector: Vector to rotate
            angle: Angle in radians, counterclockwise when positive

        Returns:
            The rotated vector, with the same magnitude
        """
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return Point(vector.x * cos_a - vector.y * sin_a,
                     vector.x * sin_a + vector.y * cos_a)

    @staticmethod
    def segments_intersection(s1: Line, s2: Line) -> Optional[Point]:
        """
        Find where two segments cross.

        Args:
            s1: First segment
            s2: Second segment

        Returns:
            The crossing point, or None when the segments are apart. Segments
            lying on top of each other share a stretch rather than a point, and
            also give None.
        """
        crossing = s1.to_shapely().intersection(s2.to_shapely())
        if crossing.is_empty or crossing.geom_type != 'Point':
            return None
        return Point.from_shapely(crossing)


geometry = Geometry()
