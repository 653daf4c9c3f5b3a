import numpy as np
from typing import Dict, Any, List, Optional, Sequence
from exam_scan.utils import app_logger
from exam_scan.core.geometry import Homography, Point2D, PointLike, compute_homography, to_quad
from exam_scan.core.raster import RasterImage

class WarpingProcessor:
    """
    Geometry rectifier for photographed answer sheets:
    1. Order the 4 detected corners (optional).
    2. Compute the canonical -> source homography.
    3. Resample the photo into the canonical rectangle (bilinear).

    Corner detection itself happens upstream (capture UI / fiducials).
    """

    # Default canonical size: A4 at 96 DPI
    DEFAULT_WARP_WIDTH = 827
    DEFAULT_WARP_HEIGHT = 1169
    # Output rows resampled per numpy batch
    ROW_BAND = 256

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.preprocessing_cfg = config.get('preprocessing', {})
        warp_size = config.get('warp_size', {})
        self.warp_w = int(warp_size.get('width', self.DEFAULT_WARP_WIDTH))
        self.warp_h = int(warp_size.get('height', self.DEFAULT_WARP_HEIGHT))
        app_logger.debug(f"WarpingProcessor initialized ({self.warp_w}x{self.warp_h}).")

    @staticmethod
    def order_corners(points: Sequence[PointLike]) -> List[Point2D]:
        """Sort 4 corners as: Top-Left, Top-Right, Bottom-Right, Bottom-Left."""
        quad = to_quad(points)
        centers = np.array([p.as_tuple() for p in quad], dtype=np.float64)

        # Ordering by sum and difference of coordinates
        s = centers.sum(axis=1)
        diff = np.diff(centers, axis=1).ravel()

        tl_idx = int(np.argmin(s))
        br_idx = int(np.argmax(s))
        tr_idx = int(np.argmin(diff))
        bl_idx = int(np.argmax(diff))

        if len({tl_idx, tr_idx, br_idx, bl_idx}) != 4:
            raise ValueError(f"Cannot order corners unambiguously: {[p.as_tuple() for p in quad]}")

        return [quad[tl_idx], quad[tr_idx], quad[br_idx], quad[bl_idx]]

    def warp(self, image: RasterImage, h: Homography, out_width: int, out_height: int) -> RasterImage:
        """
        Resample ``image`` into an ``out_width`` x ``out_height`` canvas.

        ``h`` maps destination pixel coordinates to source pixel coordinates.
        Each channel is blended from the 4 neighbouring source pixels. Output
        pixels whose source falls outside, or within one pixel of the right /
        bottom edge, stay (0, 0, 0, 0).
        """
        if out_width < 1 or out_height < 1:
            raise ValueError(f"Output size must be positive, got {out_width}x{out_height}")

        src = image.pixels
        src_h, src_w = src.shape[:2]
        h11, h12, h13, h21, h22, h23, h31, h32, h33 = h.coefficients

        out = np.zeros((out_height, out_width, RasterImage.CHANNELS), dtype=np.uint8)
        xs = np.arange(out_width, dtype=np.float64)

        for y0 in range(0, out_height, self.ROW_BAND):
            y1 = min(out_height, y0 + self.ROW_BAND)
            ys = np.arange(y0, y1, dtype=np.float64)[:, None]

            with np.errstate(divide='ignore', invalid='ignore'):
                den = xs * h31 + ys * h32 + h33
                src_x = (xs * h11 + ys * h12 + h13) / den
                src_y = (xs * h21 + ys * h22 + h23) / den

            x_floor = np.floor(src_x)
            y_floor = np.floor(src_y)
            valid = (np.isfinite(src_x) & np.isfinite(src_y)
                     & (x_floor >= 0) & (x_floor < src_w - 1)
                     & (y_floor >= 0) & (y_floor < src_h - 1))
            if not valid.any():
                continue

            xi = x_floor[valid].astype(np.intp)
            yi = y_floor[valid].astype(np.intp)
            x_frac = (src_x[valid] - x_floor[valid])[:, None]
            y_frac = (src_y[valid] - y_floor[valid])[:, None]

            tl = src[yi, xi].astype(np.float64)
            tr = src[yi, xi + 1].astype(np.float64)
            bl = src[yi + 1, xi].astype(np.float64)
            br = src[yi + 1, xi + 1].astype(np.float64)

            top = tl * (1 - x_frac) + tr * x_frac
            bottom = bl * (1 - x_frac) + br * x_frac
            blended = top * (1 - y_frac) + bottom * y_frac

            band = out[y0:y1]
            band[valid] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

        return RasterImage(out)

    def canonical_corners(self, out_width: int, out_height: int) -> List[Point2D]:
        return [Point2D(0, 0), Point2D(out_width, 0), Point2D(out_width, out_height), Point2D(0, out_height)]

    def rectify(self, image: RasterImage, corners: Sequence[PointLike],
                out_width: Optional[int] = None, out_height: Optional[int] = None) -> RasterImage:
        """
        Main flow: photo + 4 sheet corners -> canonical sheet image.

        ``corners`` are TL, TR, BR, BL unless ``preprocessing.order_corners``
        is enabled in the config.
        """
        try:
            warp_w = out_width or self.warp_w
            warp_h = out_height or self.warp_h
            app_logger.info(f"Rectifying image. Input size: {image.width}x{image.height} -> {warp_w}x{warp_h}")

            quad = to_quad(corners)
            if self.preprocessing_cfg.get('order_corners', False):
                quad = self.order_corners(quad)

            # Canonical pixel in, source pixel out
            matrix = compute_homography(self.canonical_corners(warp_w, warp_h), quad)
            rectified = self.warp(image, matrix, warp_w, warp_h)

            app_logger.info("Rectification completed successfully.")
            return rectified

        except Exception as e:
            app_logger.error(f"Error during rectification: {e}")
            raise
