"""
Image engine used by the favicon pipeline.

``ImageEngine`` is the narrow capability the rest of the package depends on.
It can identify, render, encode an ICO and encode a PNG. ``PillowEngine``
implements it with Pillow for raster images and CairoSVG for SVG, so the
planner, writer and orchestrator can be tested with an in-memory fake.
"""
from __future__ import annotations

import gzip
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageColor, ImageFilter, ImageOps, UnidentifiedImageError

from favicon_generator.errors import DecodeError, EngineError
from favicon_generator.planner import CropPolicy

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"
_SNIFF_LENGTH = 4096


@dataclass(frozen=True)
class ProbeResult:
    format: str
    is_vector: bool
    width: int
    height: int


class ImageEngine(ABC):
    """Abstract image engine: everything the pipeline needs from an image library."""

    @abstractmethod
    def identify(self, data: bytes) -> ProbeResult:
        pass

    @abstractmethod
    def render(self, source, config):
        """Return a raster of exactly ``config.width`` x ``config.height``."""

    @abstractmethod
    def encode_ico(self, frames) -> bytes:
        """``frames`` is a list of ``(raster, size)`` pairs."""

    @abstractmethod
    def encode_png(self, raster) -> bytes:
        pass


def looks_like_svg(data):
    """Sniffs SVG (or gzip-compressed SVGZ) by its document root."""
    if data[:2] == _GZIP_MAGIC:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError):
            return False
    head = data[:_SNIFF_LENGTH].lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    if not head.startswith((b"<?xml", b"<!--", b"<!doctype", b"<svg")):
        return False
    return b"<svg" in head


def _load_cairosvg():
    # cairosvg loads the native cairo library on import
    try:
        import cairosvg
    except (ImportError, OSError) as e:
        raise EngineError(f"SVG input needs the cairo library, which could not be loaded: {e}") from e
    return cairosvg


class PillowEngine(ImageEngine):
    """Pillow for raster decode/resize/encode, CairoSVG for vector rasterization."""

    def identify(self, data):
        if looks_like_svg(data):
            fmt = "SVGZ" if data[:2] == _GZIP_MAGIC else "SVG"
            try:
                with self._rasterize_svg(data) as image:
                    width, height = image.size
            except EngineError:
                raise
            except Exception as e:
                raise DecodeError(f"Cannot read the SVG document: {e}") from e
            logger.debug(f"Identified {fmt} ({width}x{height})")
            return ProbeResult(format=fmt, is_vector=True, width=width, height=height)

        try:
            with Image.open(BytesIO(data)) as image:
                fmt = image.format
                width, height = image.size
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"Unrecognized or corrupt image: {e}") from e

        logger.debug(f"Identified {fmt} ({width}x{height})")
        return ProbeResult(
            format=fmt,
            is_vector=False,
            width=width,
            height=height,
        )

    def render(self, source, config):
        size = (config.width, config.height)

        if source.is_vector:
            image = self._render_vector(source, size)
        else:
            image = self._render_raster(source, size, config.crop)

        if config.background:
            canvas = Image.new("RGBA", size, ImageColor.getcolor(config.background, "RGBA"))
            image = Image.alpha_composite(canvas, image)

        if config.sharpen > 0:
            image = image.filter(
                ImageFilter.UnsharpMask(radius=1, percent=round(config.sharpen * 100), threshold=0)
            )

        return image

    def encode_ico(self, frames):
        # Pillow only emits sizes no larger than the primary image
        ordered = sorted(frames, key=lambda frame: frame[1], reverse=True)
        primary = ordered[0][0]
        buffer = BytesIO()
        primary.save(
            buffer,
            format="ICO",
            sizes=[(size, size) for _, size in ordered],
            append_images=[raster for raster, _ in ordered[1:]],
        )
        return buffer.getvalue()

    def encode_png(self, raster):
        buffer = BytesIO()
        raster.save(buffer, format="PNG")
        return buffer.getvalue()

    def _render_vector(self, source, size):
        """Scale the art to cover the target, then crop the centre."""
        width, height = size
        scale = max(width / source.width, height / source.height)
        output_width = max(width, math.ceil(round(source.width * scale, 6)))
        output_height = max(height, math.ceil(round(source.height * scale, 6)))

        with self._rasterize_svg(source.data, output_width, output_height) as image:
            return ImageOps.fit(
                image.convert("RGBA"),
                size,
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )

    def _render_raster(self, source, size, crop):
        with Image.open(BytesIO(source.data)) as decoded:
            image = ImageOps.exif_transpose(decoded).convert("RGBA")

        if crop == CropPolicy.CENTER:
            return ImageOps.fit(image, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
        return ImageOps.pad(
            image,
            size,
            method=Image.Resampling.LANCZOS,
            color=(0, 0, 0, 0),
            centering=(0.5, 0.5),
        )

    def _rasterize_svg(self, data, output_width=None, output_height=None):
        cairosvg = _load_cairosvg()

        if data[:2] == _GZIP_MAGIC:
            data = gzip.decompress(data)
        png_data = cairosvg.svg2png(
            bytestring=data,
            output_width=output_width,
            output_height=output_height,
        )
        return Image.open(BytesIO(png_data))
