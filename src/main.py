"""Command-line entry point: render a driving route between two addresses to PNG."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from domain.errors import RouteMapError
from domain.models import MapSettings
from domain.profiles import load_profile
from services.map_service import RouteMapService
from shared.constants import API_KEY_ENV_VAR, MAX_ZOOM, MarkerStyle

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> Path:
    """Configure logging to stdout and a log file in the user cache dir.

    Returns:
        Path to the log file.
    """
    log_dir = Path(os.getenv('XDG_CACHE_HOME') or Path.home() / '.cache') / 'route-map' / 'log'
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / 'route_map.log'

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(str(log_file), encoding='utf-8'),
        ],
    )
    return log_file


def load_api_key() -> str:
    """Load the openrouteservice key from .secrets.env/.env or the environment."""
    repo_root = Path(__file__).resolve().parent.parent
    candidates = [
        Path('.secrets.env'),
        Path('.env'),
        repo_root / '.secrets.env',
        repo_root / '.env',
    ]
    for p in candidates:
        if p.exists():
            load_dotenv(p)
            break
    return os.getenv(API_KEY_ENV_VAR, '').strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='route-map',
        description='Render a static map image of a driving route between two addresses',
    )
    parser.add_argument('start', help='Start address')
    parser.add_argument('end', help='End address')
    parser.add_argument('--zoom', type=int, choices=range(MAX_ZOOM + 1), metavar='N')
    parser.add_argument('--profile', help='Settings profile name or path to a TOML file')
    parser.add_argument('--output-dir', help='Directory for the PNG file')
    parser.add_argument('--no-crop', action='store_true', help='Keep whole tiles')
    parser.add_argument(
        '--marker-style',
        choices=[s.value for s in MarkerStyle],
        help='Icon used for start/end markers',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def settings_from_args(args: argparse.Namespace) -> MapSettings:
    settings = load_profile(args.profile) if args.profile else MapSettings()
    overrides: dict[str, object] = {}
    if args.zoom is not None:
        overrides['zoom'] = args.zoom
    if args.output_dir:
        overrides['output_dir'] = args.output_dir
    if args.no_crop:
        overrides['crop_image'] = False
    if args.marker_style:
        overrides['marker_style'] = MarkerStyle(args.marker_style)
    if overrides:
        settings = MapSettings.model_validate({**settings.model_dump(), **overrides})
    return settings


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    api_key = load_api_key()
    if not api_key:
        logger.error(
            'API key not found: set %s in the environment or .secrets.env', API_KEY_ENV_VAR
        )
        return 1

    try:
        settings = settings_from_args(args)
        service = RouteMapService(api_key, settings)
        path = asyncio.run(service.get_map(args.start, args.end))
    except (RouteMapError, FileNotFoundError, ValueError) as e:
        logger.error('Map generation failed: %s', e)
        return 1

    print(path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
