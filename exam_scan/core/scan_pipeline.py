import time
from typing import Any, Dict, Optional, Sequence

from exam_scan.core.geometry import PointLike
from exam_scan.core.grade_manager import GradeManager
from exam_scan.core.grid import BubbleGridSpec
from exam_scan.core.models import ExamRow, Question, ScanResult
from exam_scan.core.omr_engine import OMREngine
from exam_scan.core.raster import RasterImage
from exam_scan.core.warp_processor import WarpingProcessor
from exam_scan.utils import app_logger


class ScanPipeline:
    """
    Grades one captured sheet of a given exam row:
    1. Rectify the frame with the 4 corner points.
    2. Read the bubbles with the grid layout.
    3. Score against the row-specific answer key.

    Geometry and grid errors propagate to the caller unchanged.
    """

    def __init__(self, config: Dict[str, Any], questions: Sequence[Question], row: ExamRow,
                 grid: BubbleGridSpec):
        self.config = config
        self.grid = grid
        self.warp_processor = WarpingProcessor(config)
        self.omr_engine = OMREngine(config)
        self.grade_manager = GradeManager(questions, row, config)
        self.last_rectified: Optional[RasterImage] = None

    def process(self, image: RasterImage, corners: Sequence[PointLike]) -> ScanResult:
        start_time = time.time()

        # 1. Rectify into the size the grid was laid out for
        rectified = self.warp_processor.rectify(image, corners, self.grid.width, self.grid.height)
        self.last_rectified = rectified

        # 2. Read bubbles
        readings = self.omr_engine.read_sheet(rectified, self.grid)

        # 3. Score
        result = self.grade_manager.grade(readings)

        elapsed_time = time.time() - start_time
        app_logger.info(f"Sheet processed in {elapsed_time:.2f}s. "
                        f"Read {result.answered_count}/{len(result.answers)}, score {result.score}/{result.total_possible}")
        return result
