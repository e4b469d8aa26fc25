"""
ArtworkConfig - Settings consumed by the artwork pipeline.

Values come from ARTWORK_* environment variables or from the
``[artwork]`` section of an INI file.
"""

import configparser
import logging
import os
import tempfile
from dataclasses import dataclass, asdict
from typing import List, Optional

from .errors import ConfigurationError


ENV_VARS = {
    'output_base_path': 'ARTWORK_OUTPUT_PATH',
    'base_url': 'ARTWORK_BASE_URL',
    'default_image_path': 'ARTWORK_DEFAULT_IMAGE',
    'default_image_url': 'ARTWORK_DEFAULT_IMAGE_URL',
    'jpeg_quality': 'ARTWORK_JPEG_QUALITY',
    'job_timeout': 'ARTWORK_JOB_TIMEOUT',
}

# Option names in the [artwork] section of a config file
FILE_OPTIONS = {
    'output_base_path': 'output_path',
    'base_url': 'base_url',
    'default_image_path': 'default_image',
    'default_image_url': 'default_image_url',
    'jpeg_quality': 'jpeg_quality',
    'job_timeout': 'job_timeout',
}

SECTION = 'artwork'


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class ArtworkConfig:
    """
    Artwork pipeline configuration.

    Attributes:
        output_base_path: Directory under which derivative trees are created
        base_url: Public URL that mirrors ``output_base_path``
        default_image_path: Image used when no artwork can be found
        default_image_url: Public URL of the default image
        jpeg_quality: Quality of the generated JPEG files
        job_timeout: Seconds to wait for each derivative job
    """
    output_base_path: Optional[str] = None
    base_url: Optional[str] = None
    default_image_path: Optional[str] = None
    default_image_url: Optional[str] = None
    jpeg_quality: int = 75
    job_timeout: float = 120.0

    @classmethod
    def from_env(cls) -> 'ArtworkConfig':
        """Build configuration from ARTWORK_* environment variables."""
        values = {name: _clean(os.getenv(var)) for name, var in ENV_VARS.items()}
        return cls._from_values(values)

    @classmethod
    def from_file(cls, filepath: str) -> 'ArtworkConfig':
        """Build configuration from the [artwork] section of an INI file."""
        parser = configparser.ConfigParser()
        if not parser.read(filepath):
            raise ConfigurationError(f"Configuration file not found: {filepath}")
        if not parser.has_section(SECTION):
            raise ConfigurationError(f"Configuration file {filepath} has no [{SECTION}] section")

        values = {
            name: _clean(parser.get(SECTION, option, fallback=None))
            for name, option in FILE_OPTIONS.items()
        }
        return cls._from_values(values)

    @classmethod
    def _from_values(cls, values: dict) -> 'ArtworkConfig':
        config = cls(
            output_base_path=values['output_base_path'],
            base_url=values['base_url'],
            default_image_path=values['default_image_path'],
            default_image_url=values['default_image_url'],
        )
        try:
            if values.get('jpeg_quality'):
                config.jpeg_quality = int(values['jpeg_quality'])
            if values.get('job_timeout'):
                config.job_timeout = float(values['job_timeout'])
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e
        return config

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when usable)."""
        errors = []
        if not self.base_url:
            errors.append(
                f"Unable to obtain a value for the artwork base URL ({ENV_VARS['base_url']})")
        if not self.default_image_path:
            errors.append(
                f"Default image path is not defined ({ENV_VARS['default_image_path']})")
        if not self.default_image_url:
            errors.append(
                f"Default image URL is not defined ({ENV_VARS['default_image_url']})")
        if not 1 <= self.jpeg_quality <= 95:
            errors.append(f"JPEG quality must be between 1 and 95, got {self.jpeg_quality}")
        if self.job_timeout <= 0:
            errors.append(f"Job timeout must be positive, got {self.job_timeout}")
        return errors

    def resolve(self, logger: Optional[logging.Logger] = None) -> 'ArtworkConfig':
        """
        Apply defaults and check the configuration.

        A missing output base path falls back to the system temp directory.

        Raises:
            ConfigurationError: if ``validate()`` reports any problem
        """
        logger = logger or logging.getLogger(__name__)
        if not self.output_base_path:
            self.output_base_path = tempfile.gettempdir()
            logger.warning(
                f"Unable to obtain a value for the base output path "
                f"({ENV_VARS['output_base_path']}). Using system temporary "
                f"directory [ {self.output_base_path} ]"
            )

        errors = self.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ConfigurationError("; ".join(errors))
        return self

    @classmethod
    def load(
        cls,
        filepath: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ) -> 'ArtworkConfig':
        """Load from ``filepath`` if given, else the environment, and resolve."""
        config = cls.from_file(filepath) if filepath else cls.from_env()
        return config.resolve(logger)

    def to_dict(self) -> dict:
        return asdict(self)
