"""
Scaler - Aspect-preserving target sizes and resampling.
"""

import logging
import time
from typing import Optional, Tuple

from PIL import Image

from .errors import ValidationError
from .models import BoundBox


def scale_dimensions(width: int, height: int, bound: BoundBox) -> Tuple[int, int]:
    """
    Compute the output size of a source image fitted to a bound box.

    Exactly one output dimension equals the bound; the other is derived
    from the source aspect ratio and rounded down. The result is never
    padded out to the full bound.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        bound: Maximum output size

    Returns:
        Tuple of (width, height)
    """
    if width <= 0 or height <= 0:
        raise ValidationError(f"Source dimensions must be positive, got {width}x{height}")

    source_ratio = width / height
    if source_ratio < bound.ratio:
        out_height = bound.height
        out_width = (bound.height * width) // height
    else:
        out_width = bound.width
        out_height = (bound.width * height) // width

    # Extremely thin sources can floor to zero
    return max(out_width, 1), max(out_height, 1)


class Scaler:
    """
    Resizes bitmaps to fit a bound box using a Lanczos filter.
    """

    def __init__(
        self,
        resample: Image.Resampling = Image.Resampling.LANCZOS,
        logger: Optional[logging.Logger] = None
    ):
        self.resample = resample
        self.logger = logger or logging.getLogger(__name__)

    def scale(self, image: Image.Image, bound: BoundBox) -> Image.Image:
        """Return a new image resized to fit ``bound``."""
        start = time.time()
        size = scale_dimensions(image.width, image.height, bound)
        resized = image.resize(size, self.resample)
        self.logger.debug(
            f"Rescaled {image.width}x{image.height} -> {size[0]}x{size[1]} "
            f"in {(time.time() - start) * 1000:.0f} ms"
        )
        return resized
