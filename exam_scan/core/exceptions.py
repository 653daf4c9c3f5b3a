"""Typed failures of the scan grading pipeline."""


class OMRError(Exception):
    """Base class for every error raised by exam_scan.core."""


class DegenerateGeometry(OMRError):
    """The four corner points do not define a usable quadrilateral.

    Raised for duplicate or collinear corners and for singular systems.
    The capture has to be repeated; nothing is approximated.
    """


class InvalidGridSpec(OMRError):
    """A bubble grid does not fit the rectified image (configuration error)."""
