"""
Pytest fixtures for artwork tests.
"""

import io
import zipfile

import pytest


BASE_URL = 'https://rod.example.com/artwork'
DEFAULT_IMAGE_URL = 'https://rod.example.com/static/default.jpg'


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def make_image():
    """Factory writing a solid-colour image of the given size and format."""
    from PIL import Image

    def _make(path, size=(400, 300), fmt='JPEG', mode='RGB', color='red'):
        img = Image.new(mode, size, color=color)
        img.save(str(path), format=fmt)
        return str(path)

    return _make


@pytest.fixture
def pdf_bytes():
    """Fixture providing a two-page PDF whose first page is 400x300 points."""
    import pymupdf

    doc = pymupdf.open()
    first = doc.new_page(width=400, height=300)
    first.insert_text((50, 72), "Cover artwork")
    doc.new_page(width=100, height=800)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_zip():
    """Factory writing a ZIP file from a mapping of entry name -> bytes."""

    def _make(path, entries):
        with zipfile.ZipFile(str(path), 'w') as zf:
            for name, data in entries.items():
                zf.writestr(name, data)
        return str(path)

    return _make


@pytest.fixture
def default_image(tmp_path, make_image):
    """Fixture providing the configured default image on disk."""
    return make_image(tmp_path / 'default.jpg', size=(120, 90), color='gray')


@pytest.fixture
def output_base(tmp_path):
    """Fixture providing an existing output base directory."""
    base = tmp_path / 'output'
    base.mkdir()
    return base


@pytest.fixture
def art_config(output_base, default_image):
    """Fixture providing a resolved artwork configuration."""
    from artwork.config import ArtworkConfig

    return ArtworkConfig(
        output_base_path=str(output_base),
        base_url=BASE_URL,
        default_image_path=default_image,
        default_image_url=DEFAULT_IMAGE_URL,
        job_timeout=30.0,
    )


@pytest.fixture
def sample_key():
    """Fixture providing a catalog key."""
    from artwork.models import CatalogKey
    return CatalogKey('CB01UND443B', '7644015861357')


@pytest.fixture
def catalog():
    """Fixture providing an empty in-memory catalog."""
    from artwork.catalog import MemoryCatalog
    return MemoryCatalog()


@pytest.fixture
def artwork_zip(tmp_path, make_zip, pdf_bytes):
    """Fixture providing an artwork archive with one nested PDF."""
    return make_zip(
        tmp_path / 'cb01nd443b1_artwork.zip',
        {
            'readme.txt': b'artwork archive',
            'nested/dir/cover.pdf': pdf_bytes,
        },
    )


@pytest.fixture
def sample_record(artwork_zip):
    """Fixture providing an artwork record pointing at ``artwork_zip``."""
    from artwork.models import ArtworkRecord

    return ArtworkRecord(
        nrn='CB01UND443B',
        nsn='7644015861357',
        path=artwork_zip,
        size=346994147,
        cd_name='cb01nd443b1',
    )


@pytest.fixture
def jpeg_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (100, 100), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()
