"""exam_scan: rectify, read and grade printed bubble sheets; build balanced exam rows."""

__version__ = "1.0.0"
