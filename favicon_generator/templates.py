"""
Manifest and HTML snippet rendering.

Both templates are filled from the ``OutputPlan`` so the sizes they
reference are always the sizes the writer produced.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from html import escape
from typing import Optional

from favicon_generator.planner import (
    APPLE_TOUCH_ICON_PNG_SIZES,
    FILE_FAVICON,
    FILE_MANIFEST,
    ICO_FRAME_SIZES,
    ICON_PNG_SIZES,
    PNG_MIME_TYPE,
    png_filename,
)


@dataclass(frozen=True)
class ManifestModel:
    name: str
    icons: tuple
    short_name: Optional[str] = None
    theme_color: Optional[str] = None
    background_color: Optional[str] = None

    def to_dict(self):
        content = {"name": self.name}
        if self.short_name:
            content["short_name"] = self.short_name
        content["icons"] = [icon.to_dict() for icon in self.icons]
        if self.theme_color:
            content["theme_color"] = self.theme_color
        if self.background_color:
            content["background_color"] = self.background_color
        if self.theme_color or self.background_color:
            content["display"] = "standalone"
        return content


def build_manifest(plan, settings):
    return ManifestModel(
        name=settings.app_name,
        short_name=settings.app_short_name,
        icons=plan.manifest_icons,
        theme_color=settings.theme_color,
        background_color=settings.background_color,
    )


def render_manifest(model):
    return json.dumps(model.to_dict(), indent=2, ensure_ascii=False) + "\n"


def render_html(plan, settings):
    """Render the ``<head>`` snippet referencing every generated file."""
    prefix = escape(plan.path_prefix, quote=True)
    ico_sizes = " ".join(f"{size}x{size}" for size in ICO_FRAME_SIZES)

    lines = [f'<link rel="icon" href="{prefix}{FILE_FAVICON}" sizes="{ico_sizes}">']

    for size in sorted(ICON_PNG_SIZES):
        lines.append(
            f'<link rel="icon" type="{PNG_MIME_TYPE}" sizes="{size}x{size}" '
            f'href="{prefix}{png_filename(size)}">'
        )

    for size in sorted(APPLE_TOUCH_ICON_PNG_SIZES):
        lines.append(
            f'<link rel="apple-touch-icon" sizes="{size}x{size}" '
            f'href="{prefix}{png_filename(size)}">'
        )

    lines.append(f'<link rel="manifest" href="{prefix}{FILE_MANIFEST}">')
    lines.append(f'<meta name="application-name" content="{escape(settings.app_name, quote=True)}">')
    if settings.app_short_name:
        lines.append(
            f'<meta name="apple-mobile-web-app-title" content="{escape(settings.app_short_name, quote=True)}">'
        )
    if settings.theme_color:
        lines.append(f'<meta name="theme-color" content="{escape(settings.theme_color, quote=True)}">')
        lines.append(f'<meta name="msapplication-TileColor" content="{escape(settings.theme_color, quote=True)}">')

    return "\n".join(lines)
