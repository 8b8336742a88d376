"""
Output writer: renders planned artifacts and commits them to disk.

Artifacts are independent. Each reads the same immutable ``SourceImage`` and
writes its own path, so they run on a bounded thread pool. The first failure
cancels everything still queued. Files that were already committed stay on
disk, because there is no rollback.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from favicon_generator.errors import FaviconError, IoError, RenderError
from favicon_generator.planner import ArtifactKind
from favicon_generator.utils import atomic_write_bytes

logger = logging.getLogger(__name__)


def default_workers():
    return os.cpu_count() or 1


def encode_artifact(artifact, source, engine):
    """Render every frame of an artifact and encode it. Errors become ``RenderError``."""
    try:
        rasters = [engine.render(source, frame) for frame in artifact.frames]
        if artifact.kind == ArtifactKind.ICO:
            frames = [(raster, frame.width) for raster, frame in zip(rasters, artifact.frames)]
            return engine.encode_ico(frames)
        return engine.encode_png(rasters[0])
    except FaviconError:
        raise
    except Exception as e:
        raise RenderError(f"Rendering failed: {e}", path=artifact.path) from e


def write_artifact(artifact, source, engine):
    data = encode_artifact(artifact, source, engine)
    try:
        atomic_write_bytes(artifact.path, data)
    except OSError as e:
        raise IoError(f"Cannot write file: {e.strerror or e}", path=artifact.path) from e
    logger.info(f"Created: {artifact.path} ({len(data)} bytes)")
    return artifact.path


def write_all(artifacts, source, engine, workers=None):
    """
    Render and write all artifacts.

    Args:
        artifacts: Artifacts from an ``OutputPlan``.
        source: The loaded ``SourceImage``.
        engine: An ``ImageEngine``.
        workers: Pool size; defaults to the CPU count. 1 runs sequentially.

    Returns:
        list: Paths written, in plan order.

    Raises:
        RenderError, IoError: for the first artifact that failed.
    """
    artifacts = list(artifacts)
    workers = workers or default_workers()

    if workers <= 1 or len(artifacts) <= 1:
        return [write_artifact(artifact, source, engine) for artifact in artifacts]

    logger.debug(f"Rendering {len(artifacts)} artifacts on {workers} workers")
    with ThreadPoolExecutor(max_workers=min(workers, len(artifacts))) as executor:
        futures = [executor.submit(write_artifact, artifact, source, engine) for artifact in artifacts]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for future in pending:
            future.cancel()

        # Report the earliest planned artifact that failed
        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()

    return [future.result() for future in futures]
