import cv2
import numpy as np
from dataclasses import dataclass
from typing import Tuple, Dict, Any, List, Optional
from exam_scan.utils.logger import app_logger
from exam_scan.utils.helpers import OMRUtils
from exam_scan.core.grid import BubbleGridSpec, BubbleRegion
from exam_scan.core.raster import RasterImage


@dataclass(frozen=True)
class BubbleReading:
    """Fill densities of one question's bubbles and the bubble picked (None = unanswered)."""
    question_id: str
    densities: Tuple[float, ...]
    selected_index: Optional[int]


class OMREngine:
    """
    Reads the bubbles of a rectified sheet:
    1. Validate the grid against the image size.
    2. Measure the fill density of each bubble.
    3. Pick at most one bubble per question.
    """

    # Sub-pixel precision used when rasterizing bubble masks
    MASK_SHIFT = 4

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.OMR_CFG = config.get('ALGORITHM_CONFIG', {}).get('omr_engine', {})
        self.VIS_CFG = config.get('ALGORITHM_CONFIG', {}).get('visualization', {})
        self.luminance_threshold = float(self.OMR_CFG.get('luminance_threshold', 150))
        self.min_fill_ratio = float(self.OMR_CFG.get('min_fill_ratio', 0.40))
        self.min_margin = float(self.OMR_CFG.get('min_margin', 0.15))
        app_logger.debug("OMREngine initialized.")

    def _dark_mask(self, image: RasterImage) -> np.ndarray:
        """255 where the pixel is darker than the luminance threshold, 0 elsewhere."""
        return np.where(image.luminance() < self.luminance_threshold, 255, 0).astype(np.uint8)

    def _detect_bubble_fill(self, img_dark: np.ndarray, center_x: float, center_y: float, R: float) -> float:
        """
        Fraction of pixels inside the bubble circle that are dark.
        """
        H, W = img_dark.shape

        r_start = max(0, int(np.floor(center_y - R)))
        r_end = min(H, int(np.ceil(center_y + R)) + 1)
        c_start = max(0, int(np.floor(center_x - R)))
        c_end = min(W, int(np.ceil(center_x + R)) + 1)

        roi = img_dark[r_start:r_end, c_start:c_end]
        if roi.size == 0:
            return 0.0

        scale = 1 << self.MASK_SHIFT
        mask = np.zeros(roi.shape, dtype=np.uint8)
        cv2.circle(mask,
                   (int(round((center_x - c_start) * scale)), int(round((center_y - r_start) * scale))),
                   int(round(R * scale)), 255, -1, lineType=cv2.LINE_8, shift=self.MASK_SHIFT)

        total_circle_pixels = int(np.count_nonzero(mask))
        if total_circle_pixels == 0:
            return 0.0

        filled_pixels_in_circle = int(np.count_nonzero(roi[mask == 255]))
        return filled_pixels_in_circle / total_circle_pixels

    def read_question(self, img_dark: np.ndarray, region: BubbleRegion) -> BubbleReading:
        densities = tuple(
            self._detect_bubble_fill(img_dark, c.x, c.y, region.radius) for c in region.centers
        )
        selected = OMRUtils.select_mark(densities, self.min_fill_ratio, self.min_margin)
        return BubbleReading(question_id=region.question_id, densities=densities, selected_index=selected)

    def read_sheet(self, image: RasterImage, grid: BubbleGridSpec) -> List[BubbleReading]:
        """
        Main flow: rectified image + grid -> one reading per question.

        Raises:
            InvalidGridSpec: a region lies outside the image.
        """
        try:
            grid.validate_against(image.width, image.height)
            img_dark = self._dark_mask(image)

            readings = [self.read_question(img_dark, region) for region in grid.regions]

            answered = sum(1 for r in readings if r.selected_index is not None)
            app_logger.info(f"OMR read {answered}/{len(readings)} marked questions.")
            return readings

        except Exception as e:
            app_logger.error(f"Error in OMR Processing: {e}")
            raise

    def draw_readings(self, image: RasterImage, grid: BubbleGridSpec, readings: List[BubbleReading]) -> np.ndarray:
        """
        BGR review image with the selected bubbles painted by density
        (high / medium / low colours from the visualization config).
        """
        image_with_grid = image.to_bgr()

        threshold_high = self.VIS_CFG.get('threshold_high_density', 0.7)
        threshold_medium = self.VIS_CFG.get('threshold_medium_density', 0.5)
        color_high = tuple(self.VIS_CFG.get('color_high', [0, 255, 0]))
        color_medium = tuple(self.VIS_CFG.get('color_medium', [0, 255, 255]))
        color_low = tuple(self.VIS_CFG.get('color_low', [0, 165, 255]))

        by_id = {r.question_id: r for r in readings}
        for region in grid.regions:
            reading = by_id.get(region.question_id)
            if reading is None or reading.selected_index is None:
                continue

            center = region.centers[reading.selected_index]
            density = reading.densities[reading.selected_index]
            x, y, R = int(round(center.x)), int(round(center.y)), int(round(region.radius))

            if density >= threshold_high:
                color = color_high
            elif density >= threshold_medium:
                color = color_medium
            else:
                color = color_low
            cv2.circle(image_with_grid, (x, y), max(1, R - 2), color, -1)

        return image_with_grid
