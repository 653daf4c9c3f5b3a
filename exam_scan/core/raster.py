from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


class RasterImage:
    """
    Owned RGBA pixel buffer (height x width x 4, uint8, row-major, contiguous).
    The constructor copies its input, so callers' arrays are never mutated.
    """

    CHANNELS = 4

    def __init__(self, pixels: np.ndarray):
        arr = np.asarray(pixels)
        if arr.ndim != 3 or arr.shape[2] != self.CHANNELS:
            raise ValueError(f"Expected an (H, W, 4) RGBA array, got shape {arr.shape}")
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise ValueError("Image must be at least 1x1.")
        if arr.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {arr.dtype}")
        self._pixels = np.ascontiguousarray(arr).copy()

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def stride(self) -> int:
        """Bytes per row."""
        return self.width * self.CHANNELS

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @classmethod
    def blank(cls, width: int, height: int, fill: Tuple[int, int, int, int] = (255, 255, 255, 255)) -> "RasterImage":
        arr = np.empty((height, width, cls.CHANNELS), dtype=np.uint8)
        arr[:, :] = fill
        return cls(arr)

    @classmethod
    def from_rgba_bytes(cls, buffer: bytes, width: int, height: int) -> "RasterImage":
        expected = width * height * cls.CHANNELS
        if len(buffer) != expected:
            raise ValueError(f"Buffer has {len(buffer)} bytes, expected {expected} for {width}x{height} RGBA")
        arr = np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, cls.CHANNELS)
        return cls(arr)

    @classmethod
    def from_bgr(cls, img_bgr: np.ndarray) -> "RasterImage":
        """Wrap an OpenCV frame (BGR, BGRA or grayscale)."""
        if img_bgr.ndim == 2:
            rgba = cv2.cvtColor(img_bgr, cv2.COLOR_GRAY2RGBA)
        elif img_bgr.shape[2] == 4:
            rgba = cv2.cvtColor(img_bgr, cv2.COLOR_BGRA2RGBA)
        else:
            rgba = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGBA)
        return cls(rgba)

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(self._pixels, cv2.COLOR_RGBA2BGR)

    def to_bytes(self) -> bytes:
        return self._pixels.tobytes()

    def luminance(self) -> np.ndarray:
        """Per-pixel brightness 0.299 R + 0.587 G + 0.114 B as float32 (H x W)."""
        rgb = self._pixels[:, :, :3].astype(np.float32)
        return rgb[:, :, 0] * 0.299 + rgb[:, :, 1] * 0.587 + rgb[:, :, 2] * 0.114

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return np.array_equal(self._pixels, other._pixels)

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"
