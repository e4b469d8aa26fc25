"""
Tests for PathResolver.
"""

import os
from contextlib import contextmanager

import pytest

from artwork.errors import ConfigurationError, NotFoundError
from artwork.models import ArtworkRecord, DEFAULT_CD_NAME
from artwork.resolver import PathResolver

from conftest import BASE_URL, DEFAULT_IMAGE_URL


KEY_SEGMENT = '7644015861357+CB01UND443B'


@pytest.fixture
def resolver(art_config, catalog):
    return PathResolver(art_config, catalog)


class TestOutputLayout:
    """Tests for derivative locations."""

    def test_archive_layout(self, resolver, catalog, sample_record, sample_key, output_base):
        """Test paths and URLs follow {base}/{type}/{nsn+nrn}/{name}-{suffix}.jpg."""
        catalog.add(sample_record, 'CIB01')

        paths = resolver.resolve(sample_key, 'CIB01')

        out_dir = os.path.join(str(output_base), 'cib01', KEY_SEGMENT)
        assert paths.small_path == os.path.join(out_dir, 'cb01nd443b1_artwork-small.jpg')
        assert paths.thumbnail_path == os.path.join(out_dir, 'cb01nd443b1_artwork-thumbnail.jpg')
        assert paths.small_url == f"{BASE_URL}/cib01/{KEY_SEGMENT}/cb01nd443b1_artwork-small.jpg"
        assert paths.thumbnail_url == (
            f"{BASE_URL}/cib01/{KEY_SEGMENT}/cb01nd443b1_artwork-thumbnail.jpg")
        assert os.path.isdir(out_dir)

    def test_extracts_source_next_to_derivatives(
            self, resolver, catalog, sample_record, sample_key, output_base):
        """Test the archived PDF becomes the source."""
        catalog.add(sample_record, 'CIB01')

        paths = resolver.resolve(sample_key, 'CIB01')

        expected = os.path.join(str(output_base), 'cib01', KEY_SEGMENT, 'cover.pdf')
        assert paths.source_path == expected
        assert os.path.isfile(expected)
        assert paths.source_url == f"{BASE_URL}/cib01/{KEY_SEGMENT}/cover.pdf"
        assert paths.record is sample_record

    def test_missing_product_type_uses_default(self, resolver, catalog, sample_record, sample_key):
        catalog.add(sample_record)

        paths = resolver.resolve(sample_key, None)

        assert f"/unavailable/{KEY_SEGMENT}/" in paths.small_url

    def test_base_url_trailing_slash(self, art_config, catalog, sample_record, sample_key):
        art_config.base_url = BASE_URL + '/'
        catalog.add(sample_record)

        paths = PathResolver(art_config, catalog).resolve(sample_key, 'CIB01')

        assert paths.small_url.startswith(f"{BASE_URL}/cib01/")

    def test_output_base_must_exist(self, art_config, catalog, sample_key, tmp_path):
        """Test a missing base directory is a configuration error."""
        art_config.output_base_path = str(tmp_path / 'not' / 'there')

        with pytest.raises(ConfigurationError):
            PathResolver(art_config, catalog).resolve(sample_key, 'CIB01')

    def test_repeat_resolve_is_stable(self, resolver, catalog, sample_record, sample_key):
        catalog.add(sample_record, 'CIB01')
        assert resolver.resolve(sample_key, 'CIB01') == resolver.resolve(sample_key, 'CIB01')


class TestFallback:
    """Tests for falling back to the default image."""

    def test_no_record(self, resolver, sample_key, default_image, output_base):
        """Test a key with no record uses the default image and a synthetic record."""
        paths = resolver.resolve(sample_key, 'CIB01')

        assert paths.source_path == default_image
        assert paths.source_url == DEFAULT_IMAGE_URL
        assert paths.record.cd_name == DEFAULT_CD_NAME
        assert paths.record.size == os.path.getsize(default_image)
        assert paths.small_path == os.path.join(
            str(output_base), 'cib01', KEY_SEGMENT, 'default-small.jpg')

    def test_missing_archive(self, resolver, catalog, sample_key, tmp_path, default_image):
        record = ArtworkRecord('CB01UND443B', '7644015861357', str(tmp_path / 'gone.zip'))
        catalog.add(record, 'CIB01')

        paths = resolver.resolve(sample_key, 'CIB01')

        assert paths.source_path == default_image
        assert paths.small_path.endswith('gone-small.jpg')

    def test_archive_without_pdf(self, resolver, catalog, sample_key, tmp_path, make_zip,
                                 default_image):
        archive = make_zip(tmp_path / 'empty_artwork.zip', {'readme.txt': b'x'})
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', archive))

        assert resolver.resolve(sample_key).source_path == default_image

    def test_corrupt_archive(self, resolver, catalog, sample_key, tmp_path, default_image):
        archive = tmp_path / 'corrupt.zip'
        archive.write_bytes(b'garbage')
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', str(archive)))

        assert resolver.resolve(sample_key).source_path == default_image

    def test_unreachable_direct_source(self, resolver, catalog, sample_key, default_image):
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', '/no/such/cover.jpg'))
        assert resolver.resolve(sample_key).source_path == default_image

    def test_remote_archive_without_client(self, resolver, catalog, sample_key, default_image):
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', 's3://bucket/art/a.zip'))
        assert resolver.resolve(sample_key).source_path == default_image


class TestDirectSources:
    """Tests for records that point straight at an image."""

    def test_local_image(self, resolver, catalog, sample_key, tmp_path, make_image):
        source = make_image(tmp_path / 'cover.png', fmt='PNG')
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', source))

        paths = resolver.resolve(sample_key, 'CIB01')

        assert paths.source_path == source
        assert paths.source_url == f"{BASE_URL}/cib01/{KEY_SEGMENT}/cover.png"
        assert paths.small_path.endswith('cover-small.jpg')

    def test_file_uri_archive(self, resolver, catalog, sample_key, artwork_zip):
        from pathlib import Path
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', Path(artwork_zip).as_uri()))

        paths = resolver.resolve(sample_key, 'CIB01')

        assert paths.source_path.endswith('cover.pdf')


class TestRemoteArchives:
    """Tests for s3:// archives."""

    def test_staged_and_extracted(self, art_config, catalog, sample_key, artwork_zip, mocker):
        """Test the archive is staged locally then extracted."""
        s3 = mocker.MagicMock()

        @contextmanager
        def staged(locator):
            yield artwork_zip

        s3.staged_file.side_effect = staged
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', 's3://bucket/art/cb01_artwork.zip'))

        paths = PathResolver(art_config, catalog, s3_client=s3).resolve(sample_key, 'CIB01')

        s3.staged_file.assert_called_once_with('s3://bucket/art/cb01_artwork.zip')
        assert paths.source_path.endswith(os.path.join(KEY_SEGMENT, 'cover.pdf'))
        assert paths.small_path.endswith('cb01_artwork-small.jpg')

    def test_missing_object_falls_back(self, art_config, catalog, sample_key, default_image, mocker):
        s3 = mocker.MagicMock()
        s3.staged_file.side_effect = NotFoundError('Missing object')
        catalog.add(ArtworkRecord('CB01UND443B', '7644015861357', 's3://bucket/art/a.zip'))

        paths = PathResolver(art_config, catalog, s3_client=s3).resolve(sample_key)

        assert paths.source_path == default_image
