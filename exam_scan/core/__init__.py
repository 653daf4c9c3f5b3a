"""
Core package: business logic of the exam scanner.
Includes:
- WarpingProcessor: sheet rectification (homography + bilinear warp).
- OMREngine: bubble reading.
- GradeManager: scoring against a row's answer key.
- ExamVersionBalancer: seeded, balanced exam rows.
"""

from .exceptions import OMRError, DegenerateGeometry, InvalidGridSpec
from .geometry import Point2D, Homography, compute_homography
from .raster import RasterImage
from .models import (AnswerOption, Question, AnswerKeyEntry, AnswerKeyReport,
                     ExamRow, ScoredAnswer, ScanResult)
from .grid import BubbleRegion, BubbleGridSpec, build_column_layout, layout_for_row
from .warp_processor import WarpingProcessor
from .omr_engine import OMREngine, BubbleReading
from .grade_manager import GradeManager
from .balancer import ExamVersionBalancer, shuffle_alternatives, shuffle_questions, balance_answer_key
from .scan_pipeline import ScanPipeline

__all__ = [
    'OMRError', 'DegenerateGeometry', 'InvalidGridSpec',
    'Point2D', 'Homography', 'compute_homography', 'RasterImage',
    'AnswerOption', 'Question', 'AnswerKeyEntry', 'AnswerKeyReport',
    'ExamRow', 'ScoredAnswer', 'ScanResult',
    'BubbleRegion', 'BubbleGridSpec', 'build_column_layout', 'layout_for_row',
    'WarpingProcessor', 'OMREngine', 'BubbleReading', 'GradeManager',
    'ExamVersionBalancer', 'shuffle_alternatives', 'shuffle_questions', 'balance_answer_key',
    'ScanPipeline',
]
