"""
Decoders - Turn source artwork files into Pillow bitmaps.

Raster formats are read directly with Pillow. PDF documents are rendered
with PyMuPDF; only the first page is used.
"""

import logging
import os
import threading
import time
from typing import Dict, Iterable, List, Optional

import pymupdf
from PIL import Image

from .errors import DecodeError, UnsupportedTypeError


# MuPDF is not thread safe; every open and render goes through this lock
_PDF_LOCK = threading.Lock()


def get_extension(path: str) -> str:
    """Lowercased extension of ``path`` without the leading dot."""
    return os.path.splitext(str(path))[1].lstrip('.').lower()


class ImageDecoder:
    """
    Base class for source decoders.

    Subclasses list the extensions they handle and implement ``decode``.
    Every call returns a new image; nothing is cached.
    """

    extensions: tuple = ()

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, path: str) -> Image.Image:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({', '.join(self.extensions)})"


class RasterDecoder(ImageDecoder):
    """Decodes JPEG, PNG, GIF and BMP files."""

    extensions = ('jpg', 'jpeg', 'png', 'gif', 'bmp')

    def decode(self, path: str) -> Image.Image:
        start = time.time()
        try:
            with Image.open(path) as img:
                img.load()
                image = self._normalize_mode(img)
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Unable to read source image [ {path} ]: {e}") from e

        self.logger.debug(
            f"Retrieved source image [ {path} ] in {(time.time() - start) * 1000:.0f} ms")
        return image

    @staticmethod
    def _normalize_mode(img: Image.Image) -> Image.Image:
        """Bring palette and exotic modes to RGB/RGBA so resampling is filtered."""
        if img.mode in ('RGB', 'RGBA'):
            return img.copy()
        if img.mode in ('P', 'LA', 'PA') or 'transparency' in img.info:
            return img.convert('RGBA')
        return img.convert('RGB')


class PdfDecoder(ImageDecoder):
    """
    Renders the first page of a PDF at its native resolution.

    Rendering is serialized across all instances and threads.
    """

    extensions = ('pdf',)

    def decode(self, path: str) -> Image.Image:
        start = time.time()
        with _PDF_LOCK:
            image = self._render_first_page(path)

        self.logger.debug(
            f"Rendered first page of [ {path} ] ({image.width}x{image.height}) "
            f"in {(time.time() - start) * 1000:.0f} ms"
        )
        return image

    @staticmethod
    def _render_first_page(path: str) -> Image.Image:
        try:
            doc = pymupdf.open(path)
        except (RuntimeError, OSError, ValueError) as e:
            raise DecodeError(f"Unable to open PDF document [ {path} ]: {e}") from e

        try:
            if doc.page_count < 1:
                raise DecodeError(f"PDF document [ {path} ] does not contain any pages")
            pix = doc.load_page(0).get_pixmap(alpha=False)
            return Image.frombytes('RGB', (pix.width, pix.height), pix.samples)
        except DecodeError:
            raise
        except (RuntimeError, ValueError) as e:
            raise DecodeError(f"Unable to render PDF document [ {path} ]: {e}") from e
        finally:
            doc.close()


def default_decoders(logger: Optional[logging.Logger] = None) -> List[ImageDecoder]:
    return [RasterDecoder(logger), PdfDecoder(logger)]


class DecoderSelector:
    """
    Registry mapping file extensions to decoders.

    Selection happens before any decode; an unmapped extension raises
    UnsupportedTypeError instead of guessing.
    """

    def __init__(
        self,
        decoders: Optional[Iterable[ImageDecoder]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._registry: Dict[str, ImageDecoder] = {}
        for decoder in (default_decoders(logger) if decoders is None else decoders):
            self.register(decoder)

    def register(self, decoder: ImageDecoder) -> None:
        """Register ``decoder`` for each of its extensions, replacing earlier ones."""
        for ext in decoder.extensions:
            self._registry[ext.lower()] = decoder

    @property
    def supported_extensions(self) -> List[str]:
        return sorted(self._registry)

    def supports(self, path: str) -> bool:
        return get_extension(path) in self._registry

    def select(self, path: str) -> ImageDecoder:
        """Return the decoder for ``path`` based on its extension."""
        ext = get_extension(path)
        try:
            return self._registry[ext]
        except KeyError:
            raise UnsupportedTypeError(str(path), ext) from None

    def decode(self, path: str) -> Image.Image:
        return self.select(path).decode(path)
