from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from exam_scan.core.exceptions import DegenerateGeometry

# Relative tolerance for pivots / collinearity
_EPS = 1e-10


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Point coordinates must be finite: ({self.x}, {self.y})")

    def as_tuple(self) -> Tuple[float, float]:
        return self.x, self.y


PointLike = Union[Point2D, Tuple[float, float], Sequence[float]]


def to_point(p: PointLike) -> Point2D:
    if isinstance(p, Point2D):
        return p
    if len(p) != 2:
        raise ValueError(f"A point needs exactly 2 coordinates, got {len(p)}")
    return Point2D(p[0], p[1])


def to_quad(points: Iterable[PointLike]) -> List[Point2D]:
    """Validate and convert a corner list; exactly four points are required."""
    quad = [to_point(p) for p in points]
    if len(quad) != 4:
        raise ValueError(f"Exactly 4 points are required, got {len(quad)}")
    return quad


@dataclass(frozen=True)
class Homography:
    """
    3x3 projective transform stored as 9 row-major floats
    (h11, h12, h13, h21, h22, h23, h31, h32, h33).
    """
    coefficients: Tuple[float, ...]

    def __post_init__(self) -> None:
        coeffs = tuple(float(c) for c in self.coefficients)
        if len(coeffs) != 9:
            raise ValueError(f"A homography needs 9 coefficients, got {len(coeffs)}")
        if not all(math.isfinite(c) for c in coeffs):
            raise ValueError("Homography coefficients must be finite.")
        object.__setattr__(self, "coefficients", coeffs)

    @classmethod
    def identity(cls) -> "Homography":
        return cls((1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0))

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "Homography":
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {matrix.shape}")
        return cls(tuple(matrix.ravel()))

    def as_matrix(self) -> np.ndarray:
        return np.array(self.coefficients, dtype=np.float64).reshape(3, 3)

    def apply(self, point: PointLike) -> Point2D:
        p = to_point(point)
        h11, h12, h13, h21, h22, h23, h31, h32, h33 = self.coefficients
        w = h31 * p.x + h32 * p.y + h33
        if abs(w) < _EPS:
            raise DegenerateGeometry(f"Point {p.as_tuple()} maps to infinity.")
        return Point2D((h11 * p.x + h12 * p.y + h13) / w, (h21 * p.x + h22 * p.y + h23) / w)

    def inverse(self) -> "Homography":
        try:
            inv = np.linalg.inv(self.as_matrix())
        except np.linalg.LinAlgError as e:
            raise DegenerateGeometry(f"Homography is not invertible: {e}")
        if abs(inv[2, 2]) > _EPS:
            inv = inv / inv[2, 2]
        return Homography.from_matrix(inv)


def _check_quad(quad: List[Point2D], label: str) -> None:
    """Reject duplicate corners and any three collinear corners."""
    xs = [p.x for p in quad]
    ys = [p.y for p in quad]
    scale = max(max(xs) - min(xs), max(ys) - min(ys))
    if scale <= 0:
        raise DegenerateGeometry(f"{label} points are all identical.")

    for a, b in itertools.combinations(quad, 2):
        if math.hypot(a.x - b.x, a.y - b.y) <= _EPS * scale:
            raise DegenerateGeometry(f"{label} points contain duplicates: {a.as_tuple()}")

    for a, b, c in itertools.combinations(quad, 3):
        cross = (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)
        if abs(cross) <= 1e-9 * scale * scale:
            raise DegenerateGeometry(
                f"{label} points are collinear: {a.as_tuple()}, {b.as_tuple()}, {c.as_tuple()}")


def _solve(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Gaussian elimination with partial pivoting, then back substitution.
    ``a`` and ``b`` are modified in place.
    """
    n = a.shape[0]
    scale = float(np.max(np.abs(a))) or 1.0

    for i in range(n):
        # Swap in the row with the largest pivot-column magnitude
        max_row = i + int(np.argmax(np.abs(a[i:, i])))
        if abs(a[max_row, i]) <= _EPS * scale:
            raise DegenerateGeometry("Linear system is singular; corner points are degenerate.")
        if max_row != i:
            a[[i, max_row]] = a[[max_row, i]]
            b[[i, max_row]] = b[[max_row, i]]

        for k in range(i + 1, n):
            c = -a[k, i] / a[i, i]
            a[k, i:] += c * a[i, i:]
            a[k, i] = 0.0
            b[k] += c * b[i]

    x = np.zeros(n, dtype=np.float64)
    for i in range(n - 1, -1, -1):
        x[i] = (b[i] - np.dot(a[i, i + 1:], x[i + 1:])) / a[i, i]
    return x


def compute_homography(src: Iterable[PointLike], dst: Iterable[PointLike]) -> Homography:
    """
    Homography mapping each ``src[i]`` onto ``dst[i]``.

    Both quads must use the same winding order. h33 is fixed at 1 and the
    remaining 8 coefficients come from the 8x8 system built from the point
    pairs.

    Raises:
        ValueError: not exactly four points per quad.
        DegenerateGeometry: duplicate / collinear points or a singular system.
    """
    src_quad = to_quad(src)
    dst_quad = to_quad(dst)
    _check_quad(src_quad, "Source")
    _check_quad(dst_quad, "Destination")

    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for i, (s, d) in enumerate(zip(src_quad, dst_quad)):
        x, y = s.x, s.y
        xp, yp = d.x, d.y
        a[2 * i] = [x, y, 1, 0, 0, 0, -x * xp, -y * xp]
        a[2 * i + 1] = [0, 0, 0, x, y, 1, -x * yp, -y * yp]
        b[2 * i] = xp
        b[2 * i + 1] = yp

    h = _solve(a, b)
    return Homography(tuple(h) + (1.0,))
