"""
2D vector value type used by the triangulator and the mesh extruder.

Vectors are immutable: every operation returns a brand new Vector2,
so points can be shared freely between the outline, the triangulator
and the extruder without anyone stepping on anyone else.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class Vector2:
    """An immutable 2D vector (x, y)."""

    x: float
    y: float

    def add(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def sub(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def multiply(self, scalar: float) -> 'Vector2':
        return Vector2(self.x * scalar, self.y * scalar)

    def dot(self, other: 'Vector2') -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Vector2') -> float:
        """
        2D scalar cross product (z component of the 3D cross product).

        Positive when `other` is counter-clockwise from `self`.
        """
        return self.x * other.y - self.y * other.x

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> 'Vector2':
        """
        Return the unit vector pointing the same way.

        A zero-length vector has no direction, so it normalizes to the zero
        vector instead of dividing by zero. Callers that need a real
        direction must check magnitude() themselves.
        """
        length = self.magnitude()
        if length == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / length, self.y / length)

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return self.add(other)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return self.sub(other)

    def __mul__(self, scalar: float) -> 'Vector2':
        return self.multiply(scalar)

    __rmul__ = __mul__

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Vector2({self.x:.4f}, {self.y:.4f})"
