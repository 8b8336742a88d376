"""Command-line surface: turns argv into an immutable ``Settings``."""
from __future__ import annotations

import argparse
import re
from pathlib import Path

from config import DEFAULT_CONFIG_PATH, Config, Settings
from favicon_generator import __version__

APP_NAME = "Favicon Generator"
DEFAULT_PATH_PREFIX = "/"
DEFAULT_APP_NAME = "App"

EXAMPLES = """examples:
  favicon-generator /path/to/image /path/to/folder   # Uses /path/to/image to generate favicons into /path/to/folder
"""

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def hex_color(value):
    if value is None or value == "":
        return None
    if not _HEX_COLOR.match(value):
        raise argparse.ArgumentTypeError(f"`{value}` is not a hex color such as #ffffff")
    return value.lower()


def positive_int(value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise argparse.ArgumentTypeError(f"`{value}` is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def load_config(argv):
    """Find ``--config`` before the full parse so it can supply defaults."""
    pre = argparse.ArgumentParser(prog="favicon-generator", add_help=False)
    pre.add_argument("--config")
    known, _ = pre.parse_known_args(argv)
    try:
        return Config(known.config)
    except (OSError, ValueError) as e:
        pre.error(f"cannot load config file `{known.config or DEFAULT_CONFIG_PATH}`: {e}")


def config_default(parser, config, key, default=None, integer=False):
    """argparse only applies ``type=`` to string defaults, so check the rest here."""
    value = config.get(key, default)
    if value is None or isinstance(value, str):
        return value
    if integer and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    expected = "an integer" if integer else "a string"
    parser.error(f"config value `{key}` must be {expected}, got {value!r}")


def build_parser(config):
    parser = argparse.ArgumentParser(
        prog="favicon-generator",
        description=f"{APP_NAME} {__version__}\nIt helps you generate favicons with different formats and sizes.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input_path", type=Path,
                        help="Assign an image for generating favicons. It should be a path of a file")
    parser.add_argument("output_path", type=Path,
                        help="Assign a destination of your generated files. It should be a path of a directory")
    parser.add_argument("-y", "--overwrite", action="store_true",
                        help="Overwrite existing files without asking")
    parser.add_argument("--path-prefix", default=config_default(parser, config, "path_prefix", DEFAULT_PATH_PREFIX),
                        help="Specify the path prefix of your favicon files (default: %(default)s)")
    parser.add_argument("--no-sharpen", action="store_true",
                        help="Disable the automatic sharpening")
    parser.add_argument("--app-name", default=config_default(parser, config, "app_name", DEFAULT_APP_NAME),
                        help="Assign a name for your web app (default: %(default)s)")
    parser.add_argument("--app-short-name", default=config_default(parser, config, "app_short_name"),
                        help="Assign a short name for your web app")
    parser.add_argument("--theme-color", type=hex_color, default=config_default(parser, config, "theme_color"),
                        help="Theme color for the manifest and <meta> tags")
    parser.add_argument("--background-color", "--background", type=hex_color,
                        default=config_default(parser, config, "background_color"),
                        help="Force a background color behind every generated image")
    parser.add_argument("--workers", type=positive_int, default=config_default(parser, config, "workers", integer=True),
                        help="Number of images rendered in parallel (default: CPU count)")
    parser.add_argument("--config", default=None,
                        help="JSON file with default option values")
    parser.add_argument("--log-dir", type=Path, default=config_default(parser, config, "log_dir"),
                        help="Also write a run log into this directory")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug output")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {__version__}")
    return parser


def parse_args(argv=None):
    """Parse ``argv`` (default: ``sys.argv[1:]``) into ``Settings``."""
    config = load_config(argv)
    args = build_parser(config).parse_args(argv)

    return Settings(
        input_path=args.input_path,
        output_path=args.output_path,
        overwrite=args.overwrite,
        path_prefix=args.path_prefix,
        no_sharpen=args.no_sharpen,
        app_name=args.app_name,
        app_short_name=args.app_short_name or None,
        theme_color=args.theme_color,
        background_color=args.background_color,
        workers=args.workers,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        verbose=args.verbose,
    )
