import logging
import stat
from dataclasses import dataclass
from pathlib import Path

from favicon_generator import planner, prompt as p, source as s, templates, writer
from favicon_generator.engine import PillowEngine
from favicon_generator.errors import IoError, PathConflictError, UserAbort
from favicon_generator.utils import atomic_write_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReport:
    plan: planner.OutputPlan
    written: tuple
    html: str


def _stat(path, follow_symlinks=True):
    """Returns the stat result for ``path``, or None if nothing is there."""
    try:
        return path.stat() if follow_symlinks else path.lstat()
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise IoError(f"Cannot inspect path: {e.strerror or e}", path=path) from e


def check_output_dir(plan):
    """
    Inspect the output directory before anything is written.

    Returns:
        bool: True if at least one planned file already exists.

    Raises:
        PathConflictError: if the output path, or a planned file, has the wrong type.
        IoError: if a path cannot be inspected at all.
    """
    output_dir = plan.output_dir
    info = _stat(output_dir)
    if info is None:
        return False
    if not stat.S_ISDIR(info.st_mode):
        raise PathConflictError("Not a directory", path=output_dir)

    need_overwrite = False
    for path in plan.paths():
        info = _stat(path)
        if info is not None and stat.S_ISREG(info.st_mode):
            need_overwrite = True
        elif info is not None or _stat(path, follow_symlinks=False) is not None:
            raise PathConflictError("Not a file", path=path)
    return need_overwrite


def ensure_dir(output_dir):
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoError(f"Cannot create directory: {e.strerror or e}", path=output_dir) from e


def run(settings, engine=None, prompt=None):
    """
    Generate the favicon set described by ``settings``.

    The run loads and probes the source, checks the output directory, asks
    before overwriting, creates the directory and writes the manifest. It
    then renders the ICO and PNGs and finally builds the HTML snippet.

    Args:
        settings: Immutable ``config.Settings`` for this run.
        engine: ``ImageEngine`` to render with; defaults to ``PillowEngine``.
        prompt: Overwrite prompt provider; defaults to stdin/stdout.

    Returns:
        RunReport: the plan, the files written and the HTML snippet.

    Raises:
        UserAbort: if the user declined to overwrite existing files.
        FaviconError: for any fatal problem.
    """
    if engine is None:
        engine = PillowEngine()
    if prompt is None:
        prompt = p.InteractivePrompt()

    logger.info('Starting favicon generation')

    source = s.load_source(settings.input_path, engine)

    plan = planner.build_plan(
        settings.output_path,
        settings.path_prefix,
        settings.no_sharpen,
        source.is_vector,
        background=settings.background_color,
    )
    if source.is_vector and not settings.no_sharpen:
        logger.info("Vector input: sharpening disabled")

    need_overwrite = check_output_dir(plan)
    if need_overwrite and not settings.overwrite:
        if not p.ask_overwrite(prompt):
            logger.info("Overwrite declined, nothing written")
            raise UserAbort("Overwrite declined")

    ensure_dir(plan.output_dir)

    manifest = templates.build_manifest(plan, settings)
    try:
        atomic_write_text(plan.manifest_path, templates.render_manifest(manifest))
    except OSError as e:
        raise IoError(f"Cannot write file: {e.strerror or e}", path=plan.manifest_path) from e
    logger.info(f"Created: {plan.manifest_path}")

    written = writer.write_all(plan.artifacts, source, engine, workers=settings.workers)

    html = templates.render_html(plan, settings)

    logger.info(f"Generated {len(written) + 1} files in {plan.output_dir}")
    return RunReport(plan=plan, written=tuple(written) + (plan.manifest_path,), html=html)
