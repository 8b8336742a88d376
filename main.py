import logging
import sys

from favicon_generator.cli import parse_args
from favicon_generator.errors import FaviconError, UserAbort
from favicon_generator.logger import setup_logging
from favicon_generator.orchestrator import run

logger = logging.getLogger(__name__)


def main(argv=None):
    settings = parse_args(argv)
    try:
        setup_logging(log_dir=settings.log_dir, verbose=settings.verbose)
    except OSError as e:
        print(f"Cannot set up logging in `{settings.log_dir}`: {e}", file=sys.stderr)
        return 1

    try:
        report = run(settings)
    except UserAbort:
        return 0
    except FaviconError as e:
        logger.error(str(e))
        return 1

    print(report.html)
    return 0


if __name__ == '__main__':
    sys.exit(main())
