from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from exam_scan.core.exceptions import InvalidGridSpec
from exam_scan.core.geometry import Point2D, PointLike, to_point
from exam_scan.core.models import ExamRow

# Bubbles are lettered A-D
MAX_BUBBLES = 4


@dataclass(frozen=True)
class BubbleRegion:
    """Bubble centres of one question in canonical (rectified) pixels."""
    question_id: str
    centers: Tuple[Point2D, ...]
    radius: float

    def __post_init__(self) -> None:
        centers = tuple(to_point(c) for c in self.centers)
        if not 1 <= len(centers) <= MAX_BUBBLES:
            raise InvalidGridSpec(
                f"Question {self.question_id}: expected 1-{MAX_BUBBLES} bubbles, got {len(centers)}")
        if not (math.isfinite(self.radius) and self.radius > 0):
            raise InvalidGridSpec(f"Question {self.question_id}: bubble radius must be > 0")
        object.__setattr__(self, "question_id", str(self.question_id))
        object.__setattr__(self, "centers", centers)
        object.__setattr__(self, "radius", float(self.radius))

    def bounds(self) -> Tuple[float, float, float, float]:
        """(x_min, y_min, x_max, y_max) covering every bubble circle."""
        xs = [c.x for c in self.centers]
        ys = [c.y for c in self.centers]
        r = self.radius
        return min(xs) - r, min(ys) - r, max(xs) + r, max(ys) + r


@dataclass
class BubbleGridSpec:
    """
    Static layout of a printed answer sheet: one region per question and
    the canonical image size the layout was drawn for.
    """
    regions: List[BubbleRegion]
    width: int
    height: int

    def __post_init__(self) -> None:
        self.regions = list(self.regions)
        if self.width < 1 or self.height < 1:
            raise InvalidGridSpec(f"Grid size must be positive, got {self.width}x{self.height}")
        seen = set()
        for region in self.regions:
            if region.question_id in seen:
                raise InvalidGridSpec(f"Duplicate question id in grid: {region.question_id}")
            seen.add(region.question_id)

    def region_for(self, question_id: str) -> BubbleRegion:
        for region in self.regions:
            if region.question_id == str(question_id):
                return region
        raise KeyError(question_id)

    def validate_against(self, width: int, height: int) -> None:
        """
        Raise InvalidGridSpec when a bubble region falls outside a width x height
        image. Images of another size than the layout are fine while every
        region fits.
        """
        for region in self.regions:
            x0, y0, x1, y1 = region.bounds()
            if x0 < 0 or y0 < 0 or x1 > width or y1 > height:
                raise InvalidGridSpec(
                    f"Question {region.question_id} region ({x0:.1f}, {y0:.1f}, {x1:.1f}, {y1:.1f}) "
                    f"lies outside the {width}x{height} image")


def build_column_layout(question_ids: Sequence[str],
                        option_counts: Dict[str, int],
                        questions_per_column: int = 10,
                        start: PointLike = (70, 300),
                        column_width: float = 250,
                        row_height: float = 30,
                        bubble_offset: float = 30,
                        radius: float = 8,
                        width: int = 827,
                        height: int = 1169) -> BubbleGridSpec:
    """
    Layout shared by the printed sheet and the scanner.

    Questions (in display order) fill columns top to bottom,
    ``questions_per_column`` per column; bubbles of a question run left to
    right, ``bubble_offset`` apart. Defaults match an A4 sheet at 96 DPI.
    """
    if questions_per_column < 1:
        raise InvalidGridSpec("questions_per_column must be >= 1")
    origin = to_point(start)

    regions = []
    for position, qid in enumerate(question_ids):
        col_index = position // questions_per_column
        row_index = position % questions_per_column
        n_bubbles = min(int(option_counts.get(qid, MAX_BUBBLES)), MAX_BUBBLES)

        y = origin.y + row_index * row_height
        x0 = origin.x + col_index * column_width
        centers = tuple(Point2D(x0 + i * bubble_offset, y) for i in range(n_bubbles))
        regions.append(BubbleRegion(question_id=qid, centers=centers, radius=radius))

    return BubbleGridSpec(regions=regions, width=width, height=height)


def layout_for_row(row: ExamRow, **layout) -> BubbleGridSpec:
    """Column layout of a generated row: questions in the row's printed order."""
    question_ids = row.question_order or list(row.options)
    return build_column_layout(question_ids, row.option_counts(), **layout)
