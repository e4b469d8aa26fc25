"""
Command Line Interface for building catalog artwork.
"""

import argparse
import json
import logging
from typing import List, Optional

import urllib3

from .builder import ArtworkBuilder
from .catalog import JsonCatalog
from .config import ArtworkConfig
from .errors import ArtworkError, ConfigurationError
from .models import CatalogKey
from .s3_client import S3Client
from .s3_config import S3Config


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('artwork')


def get_config(args: argparse.Namespace) -> ArtworkConfig:
    """Get artwork configuration from a file or the environment, with CLI overrides."""
    config_file = getattr(args, 'config', None)
    config = ArtworkConfig.from_file(config_file) if config_file else ArtworkConfig.from_env()

    if getattr(args, 'output_path', None):
        config.output_base_path = args.output_path
    if getattr(args, 'base_url', None):
        config.base_url = args.base_url
    if getattr(args, 'default_image', None):
        config.default_image_path = args.default_image
    if getattr(args, 'default_image_url', None):
        config.default_image_url = args.default_image_url

    return config


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_s3_client(args: argparse.Namespace, logger: logging.Logger) -> Optional[S3Client]:
    """
    Build an S3 client when S3 settings are present.

    Returns:
        S3Client, or None when no S3 endpoint or bucket is configured
    """
    config = get_s3_config(args)
    if not (config.endpoint or config.bucket):
        return None

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ConfigurationError("S3 configuration invalid")

    if not config.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return S3Client(config, logger)


def get_builder(args: argparse.Namespace, catalog, logger: logging.Logger) -> ArtworkBuilder:
    config = get_config(args)
    s3_client = get_s3_client(args, logger)
    return ArtworkBuilder.create(config, catalog, s3_client=s3_client, logger=logger)


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command for a single product."""
    logger = setup_logging(args.verbose)

    try:
        key = CatalogKey.create(args.nrn, args.nsn)
        catalog = JsonCatalog.load(args.catalog, logger)
        builder = get_builder(args, catalog, logger)
        paths, result = builder.build(key, args.product_type)
    except FileNotFoundError as e:
        logger.error(f"Catalog not found: {e}")
        return 1
    except (ArtworkError, ValueError, OSError) as e:
        logger.error(f"Build failed: {e}")
        return 1

    output = paths.to_dict()
    output['generated'] = result.completed
    output['errors'] = result.error_details
    print(json.dumps(output, indent=2))
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Execute batch command over every catalog entry."""
    logger = setup_logging(args.verbose)

    try:
        catalog = JsonCatalog.load(args.catalog, logger)
    except FileNotFoundError:
        logger.error(f"Catalog not found: {args.catalog}")
        return 1
    except (ValueError, ArtworkError) as e:
        logger.error(f"Failed to load catalog: {e}")
        return 1

    if args.limit:
        logger.info(f"Test mode: limiting to {args.limit} items")

    try:
        builder = get_builder(args, catalog, logger)
    except ArtworkError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        stats = builder.build_all(catalog.items(), limit=args.limit)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if not args.quiet:
        print()
        print(f"Built: {stats.built}")
        print(f"Default image: {stats.fallbacks}")
        print(f"Job errors: {stats.job_errors}")
        print(f"Errors: {stats.errors}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")
        print(f"Rate: {stats.rate_per_minute:.1f} items/min")

    return 0 if stats.errors == 0 else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration and any problems with it."""
    logger = setup_logging(args.verbose)

    try:
        config = get_config(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(config.to_dict(), indent=2))
    errors = config.validate()
    for error in errors:
        print(f"ERROR: {error}")
    return 0 if not errors else 1


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Add artwork and S3 configuration overrides to a parser."""
    art_group = parser.add_argument_group('Artwork')
    art_group.add_argument('--output-path', help='Override ARTWORK_OUTPUT_PATH')
    art_group.add_argument('--base-url', help='Override ARTWORK_BASE_URL')
    art_group.add_argument('--default-image', help='Override ARTWORK_DEFAULT_IMAGE')
    art_group.add_argument('--default-image-url', help='Override ARTWORK_DEFAULT_IMAGE_URL')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='artwork',
        description='Build thumbnail and small artwork derivatives for catalog products',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m artwork build --catalog catalog.json --nrn CB01UND443B --nsn 7644015861357 --product-type CIB01
  python -m artwork batch --catalog catalog.json
  python -m artwork --config artwork.ini config

Configuration:
  Use --config FILE for an INI file with an [artwork] section, or ARTWORK_* environment variables.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--config', metavar='FILE', help='INI file with an [artwork] section')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    build_parser = subparsers.add_parser('build', help='Build artwork for one product')
    build_parser.add_argument('--catalog', required=True, help='Catalog JSON file')
    build_parser.add_argument('--nrn', required=True, help='Product NRN')
    build_parser.add_argument('--nsn', required=True, help='Product NSN')
    build_parser.add_argument('-t', '--product-type', help='Product type (default: unavailable)')
    add_config_arguments(build_parser)

    batch_parser = subparsers.add_parser('batch', help='Build artwork for every catalog entry')
    batch_parser.add_argument('--catalog', required=True, help='Catalog JSON file')
    batch_parser.add_argument('--limit', type=int, metavar='N',
                              help='Limit to N items (for testing)')
    batch_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    add_config_arguments(batch_parser)

    config_parser = subparsers.add_parser('config', help='Show effective configuration')
    add_config_arguments(config_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'build':
        return cmd_build(parsed_args)
    elif parsed_args.command == 'batch':
        return cmd_batch(parsed_args)
    elif parsed_args.command == 'config':
        return cmd_config(parsed_args)

    return 1