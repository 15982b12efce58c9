from typing import Dict, Iterable, Tuple


class Bounds:
    def __init__ (self, left, top, width, height):
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    def __str__(self) -> str:
        return f"Bounds({self.left}, {self.top}, {self.width}, {self.height})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return (self.left, self.top, self.width, self.height) == (other.left, other.top, other.width, other.height)

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> "Bounds":
        """
        Smallest axis-aligned Bounds containing all points.
        """
        xs, ys = zip(*points)
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def isInside(self, other, checkCenterOnly=False) -> bool:
        """
        Containment test against an enclosing rectangle (edges may touch).

        Parameters:
        - other (Bounds): Enclosing rectangle, usually the image.
        - checkCenterOnly (bool): Only require the center to be inside.

        Returns:
        - bool: Whether these bounds lie within other.
        """
        if checkCenterOnly:
            center = self.center()
            return Bounds(center[0], center[1], 0, 0).isInside(other)

        return self.left >= other.left and self.left + self.width <= other.left + other.width and self.top >= other.top and self.top + self.height <= other.top + other.height

    def clamp(self, width, height) -> "Bounds":
        """
        Intersect with the image rectangle (0, 0, width, height).

        Returns:
        - Bounds: Clamped bounds; zero-sized if there is no overlap.
        """
        left = min(max(self.left, 0), width)
        top = min(max(self.top, 0), height)
        right = min(max(self.left + self.width, 0), width)
        bottom = min(max(self.top + self.height, 0), height)
        return Bounds(left, top, right - left, bottom - top)

    def area(self):
        """
        Calculate the area of the Bounds object.

        Returns:
        - int: The area of the Bounds object.
        """
        return self.width * self.height

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.left), "y": float(self.top), "width": float(self.width), "height": float(self.height)}
