"""
Loading and probing of the source image.

The source is read from disk exactly once. Whether it is vector art is
decided here, and that decision gates sharpening and the rasterization
strategy for the rest of the run.
"""
from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path

from favicon_generator.errors import DecodeError, InputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceImage:
    """
    Immutable input image.

    Fields:
        path: Where the bytes were read from.
        data: Raw file contents.
        format: Format tag reported by the engine, e.g. "PNG" or "SVG".
        is_vector: True for vector formats (SVG/SVGZ).
        width: Intrinsic width, px.
        height: Intrinsic height, px.
    """
    path: Path
    data: bytes
    format: str
    is_vector: bool
    width: int
    height: int


def read_source_bytes(input_path):
    """Reads the input file, mapping filesystem problems to ``InputError``."""
    path = Path(input_path)
    try:
        info = path.stat()
    except FileNotFoundError as e:
        raise InputError("No such file", path=path) from e
    except OSError as e:
        raise InputError(f"Cannot access file: {e.strerror or e}", path=path) from e
    if not stat.S_ISREG(info.st_mode):
        raise InputError("Not a regular file", path=path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise InputError(f"Cannot read file: {e.strerror or e}", path=path) from e


def probe(data, engine):
    """
    Determine the format and vector-ness of raw image bytes.

    Returns:
        tuple: (is_vector, ProbeResult)

    Raises:
        DecodeError: if the bytes are empty or not a recognised image.
    """
    if not data:
        raise DecodeError("The input file is empty")
    result = engine.identify(data)
    return result.is_vector, result


def load_source(input_path, engine):
    """Read and probe the input image once, before anything is written."""
    path = Path(input_path)
    data = read_source_bytes(path)

    try:
        is_vector, result = probe(data, engine)
    except DecodeError as e:
        if e.path is None:
            e.path = path
        raise

    logger.info(
        f"Loaded {path} as {result.format} "
        f"({result.width}x{result.height}, {'vector' if is_vector else 'raster'})"
    )
    return SourceImage(
        path=path,
        data=data,
        format=result.format,
        is_vector=is_vector,
        width=result.width,
        height=result.height,
    )
