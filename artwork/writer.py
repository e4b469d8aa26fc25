"""
JpegWriter - Encodes derivative bitmaps to JPEG files.
"""

import logging
import os
import tempfile
import threading
import time
from typing import Optional

from PIL import Image


class JpegWriter:
    """
    Writes bitmaps to disk as JPEG, always replacing the destination.

    The image is encoded to a temporary file next to the destination and
    renamed over it, so a published derivative is never left truncated.
    """

    # Pillow's own default quality
    DEFAULT_QUALITY = 75
    FILE_MODE = 0o644

    def __init__(
        self,
        quality: int = DEFAULT_QUALITY,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize writer.

        Args:
            quality: JPEG quality for output (default: 75)
            logger: Optional logger instance
        """
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def write(
        self,
        image: Image.Image,
        path: str,
        cancelled: Optional[threading.Event] = None
    ) -> int:
        """
        Encode ``image`` to ``path``. The parent directory must exist.

        Args:
            image: Bitmap to encode
            path: Destination file
            cancelled: When set before the rename, the encoded file is
                discarded and ``path`` is left untouched

        Returns:
            Number of bytes written, or 0 if the write was cancelled

        Raises:
            OSError: if the destination cannot be opened or written
        """
        start = time.time()
        self.logger.info(f"Writing image to [ {path} ]")
        rgb = self._flatten(image)

        fd, tmp_path = tempfile.mkstemp(
            dir=os.path.dirname(path) or '.', prefix='.artwork_', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                rgb.save(f, format='JPEG', quality=self.quality)
                written = f.tell()
            if cancelled is not None and cancelled.is_set():
                self.logger.info(f"Write of [ {path} ] cancelled; discarding output")
                return 0
            os.chmod(tmp_path, self.FILE_MODE)
            os.replace(tmp_path, path)
        finally:
            self.remove_tempfile(tmp_path)

        self.logger.debug(
            f"Output image [ {path} ] written in {(time.time() - start) * 1000:.0f} ms")
        return written

    def remove_tempfile(self, tmp_path: str) -> None:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as e:
                self.logger.warning(f"Could not delete {tmp_path}: {e}")

    def _flatten(self, image: Image.Image) -> Image.Image:
        """Composite transparent images onto white; return an RGB image."""
        if image.mode == 'P':
            image = image.convert('RGBA')
        if image.mode in ('RGBA', 'LA'):
            rgba = image.convert('RGBA')
            canvas = Image.new('RGB', rgba.size, 'white')
            canvas.paste(rgba, mask=rgba.getchannel('A'))
            return canvas
        return image if image.mode == 'RGB' else image.convert('RGB')
