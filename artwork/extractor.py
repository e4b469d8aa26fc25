"""
ArchiveExtractor - Pulls a single artwork entry out of a ZIP archive.
"""

import fnmatch
import logging
import os
import shutil
import zipfile
from typing import List, Optional

from .errors import ExtractionError
from .locations import to_local_path


class ArchiveExtractor:
    """
    Finds an entry matching a glob inside a ZIP archive and copies it out.

    Only the entry's base name is matched. When several entries match, the
    first in archive order wins. The copy is skipped when the destination
    file already exists, so repeated extraction is a no-op and a file that
    is already in place is never overwritten.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        # Number of entries actually copied to disk by this instance
        self.copies = 0

    @staticmethod
    def find_matches(archive: zipfile.ZipFile, pattern: str) -> List[str]:
        """Return entry names whose base name matches ``pattern``, in archive order."""
        matches = []
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = os.path.basename(info.filename.rstrip('/'))
            if name and fnmatch.fnmatchcase(name, pattern):
                matches.append(info.filename)
        return matches

    def extract(self, locator: str, pattern: str, destination: str) -> Optional[str]:
        """
        Extract the first entry matching ``pattern`` into ``destination``.

        Args:
            locator: Path or file: URI of the ZIP archive
            pattern: Glob applied to entry base names (e.g. ``*.pdf``)
            destination: Existing directory to copy the entry into

        Returns:
            Path of the extracted file, or None if nothing matched

        Raises:
            ExtractionError: if the archive cannot be read or the copy fails
        """
        if not pattern:
            raise ExtractionError("Search pattern not defined")

        archive_path = to_local_path(locator)
        try:
            with zipfile.ZipFile(archive_path) as archive:
                matches = self.find_matches(archive, pattern)
                if not matches:
                    self.logger.warning(
                        f"No entry matching [ {pattern} ] in ZIP file [ {archive_path} ]")
                    return None

                selected = matches[0]
                if len(matches) > 1:
                    self.logger.warning(
                        f"More than one entry matching [ {pattern} ] exists in ZIP file "
                        f"[ {archive_path} ]. Using the first one found [ {selected} ], "
                        f"ignoring {matches[1:]}"
                    )

                target = os.path.join(destination, os.path.basename(selected))
                self._copy_entry(archive, selected, target, archive_path)
                return target
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ExtractionError(f"Invalid ZIP file [ {archive_path} ]: {e}") from e
        except ExtractionError:
            raise
        except OSError as e:
            raise ExtractionError(
                f"Unable to extract artwork from ZIP file [ {archive_path} ]: {e}") from e

    def _copy_entry(
        self,
        archive: zipfile.ZipFile,
        entry: str,
        target: str,
        archive_path: str
    ) -> None:
        """Copy ``entry`` to ``target`` unless ``target`` already exists."""
        try:
            out = open(target, 'xb')
        except FileExistsError:
            self.logger.info(f"Target output file [ {target} ] already exists")
            return

        self.logger.debug(
            f"Extracting [ {entry} ] from ZIP file [ {archive_path} ] to [ {target} ]")
        try:
            with out, archive.open(entry) as src:
                shutil.copyfileobj(src, out, self.CHUNK_SIZE)
        except (OSError, zipfile.BadZipFile) as e:
            self._remove_partial(target)
            raise ExtractionError(
                f"Unable to copy [ {entry} ] from [ {archive_path} ] to [ {target} ]: {e}"
            ) from e
        self.copies += 1

    def _remove_partial(self, target: str) -> None:
        try:
            os.remove(target)
        except OSError as e:
            self.logger.warning(f"Could not delete partial file {target}: {e}")
