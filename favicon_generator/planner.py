"""
Derivation planner.

Turns the fixed size tables plus a handful of run options into an
``OutputPlan``: the ordered list of files to render and the manifest icon
entries that reference them. Nothing here touches the filesystem.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from favicon_generator.errors import PathConflictError
from favicon_generator.utils import normalize_prefix

ICO_FRAME_SIZES = (48, 32, 16)
ICON_PNG_SIZES = (16, 32, 64, 95, 160, 196)
APPLE_TOUCH_ICON_PNG_SIZES = (57, 60, 72, 76, 114, 120, 144, 152, 180)

DEFAULT_SHARPEN_AMOUNT = 0.5

FILE_FAVICON = "favicon.ico"
FILE_MANIFEST = "manifest.json"
PNG_MIME_TYPE = "image/png"


class Purpose(str, Enum):
    ICON_PNG = "icon-png"
    APPLE_TOUCH_ICON_PNG = "apple-touch-icon-png"
    ICO_FRAME = "ico-frame"


class ArtifactKind(str, Enum):
    ICO = "ico"
    PNG = "png"


class CropPolicy(str, Enum):
    # Vector art: cover the target, then crop the centre
    CENTER = "center"
    # Raster art: fit inside the target, then pad with transparency
    PAD = "pad"


@dataclass(frozen=True)
class SizeSpec:
    purpose: Purpose
    width: int
    height: int


@dataclass(frozen=True)
class RenderConfig:
    width: int
    height: int
    sharpen: float = 0.0
    crop: CropPolicy = CropPolicy.PAD
    background: Optional[str] = None


@dataclass(frozen=True)
class Artifact:
    path: Path
    kind: ArtifactKind
    frames: tuple


@dataclass(frozen=True)
class ManifestIcon:
    src: str
    sizes: str
    type: str = PNG_MIME_TYPE

    def to_dict(self):
        return {"src": self.src, "sizes": self.sizes, "type": self.type}


@dataclass(frozen=True)
class OutputPlan:
    output_dir: Path
    path_prefix: str
    artifacts: tuple
    manifest_path: Path
    manifest_icons: tuple
    png_sizes: tuple = field(default=())

    def __post_init__(self):
        seen = set()
        # Compared as text; existing files are checked later by the orchestrator
        root = os.path.normpath(self.output_dir)
        for path in self.paths():
            if path in seen:
                raise PathConflictError("planned more than once", path=path)
            if os.path.normpath(path.parent) != root:
                raise PathConflictError("planned outside the output directory", path=path)
            seen.add(path)

    def paths(self):
        """Every file the run will write, images first, manifest last."""
        return [artifact.path for artifact in self.artifacts] + [self.manifest_path]


def size_specs():
    """All size entries, one per table row. Duplicates across purposes are kept."""
    specs = [SizeSpec(Purpose.ICO_FRAME, size, size) for size in ICO_FRAME_SIZES]
    specs += [SizeSpec(Purpose.ICON_PNG, size, size) for size in ICON_PNG_SIZES]
    specs += [SizeSpec(Purpose.APPLE_TOUCH_ICON_PNG, size, size) for size in APPLE_TOUCH_ICON_PNG_SIZES]
    return specs


def png_sizes():
    """Sorted, deduplicated union of the icon and apple-touch-icon tables."""
    return tuple(sorted({spec.width for spec in size_specs() if spec.purpose != Purpose.ICO_FRAME}))


def png_filename(size):
    return f"favicon-{size}.png"


def sharpen_amount(no_sharpen, is_vector):
    """Vector sources are never sharpened, whatever the flag says."""
    if is_vector or no_sharpen:
        return 0.0
    return DEFAULT_SHARPEN_AMOUNT


def render_config(size, no_sharpen, is_vector, background=None):
    return RenderConfig(
        width=size,
        height=size,
        sharpen=sharpen_amount(no_sharpen, is_vector),
        crop=CropPolicy.CENTER if is_vector else CropPolicy.PAD,
        background=background,
    )


def manifest_icons(path_prefix):
    """Manifest entries come from the icon table only, ascending."""
    prefix = normalize_prefix(path_prefix)
    return tuple(
        ManifestIcon(src=f"{prefix}{png_filename(size)}", sizes=f"{size}x{size}")
        for size in sorted(ICON_PNG_SIZES)
    )


def build_plan(output_dir, path_prefix, no_sharpen, is_vector, background=None):
    """
    Build the output plan for one run.

    Args:
        output_dir: Directory all files are written into.
        path_prefix: URL prefix used by the manifest and HTML snippet.
        no_sharpen: Disable sharpening for raster sources.
        is_vector: Whether the source image is vector art.
        background: Optional colour every rendered frame is flattened onto.

    Returns:
        OutputPlan: ICO first, then one PNG per size in ascending order.
    """
    output_dir = Path(output_dir)

    ico = Artifact(
        path=output_dir / FILE_FAVICON,
        kind=ArtifactKind.ICO,
        frames=tuple(render_config(size, no_sharpen, is_vector, background) for size in ICO_FRAME_SIZES),
    )

    sizes = png_sizes()
    pngs = [
        Artifact(
            path=output_dir / png_filename(size),
            kind=ArtifactKind.PNG,
            frames=(render_config(size, no_sharpen, is_vector, background),),
        )
        for size in sizes
    ]

    return OutputPlan(
        output_dir=output_dir,
        path_prefix=normalize_prefix(path_prefix),
        artifacts=tuple([ico] + pngs),
        manifest_path=output_dir / FILE_MANIFEST,
        manifest_icons=manifest_icons(path_prefix),
        png_sizes=sizes,
    )
