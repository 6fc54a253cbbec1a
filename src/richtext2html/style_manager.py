"""Inline-style presets for rendered markup.

Each preset (``smart``, ``simple``, ``card``) maps semantic style names to
concrete image layouts and CSS snippets used by the renderers.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class ImageLayout:
    """How an embedded image is sized and placed."""

    max_side: int = 400
    style: str = "float:right;max-width:50%;height:auto;margin:0 0 1rem 1rem;"
    centered: bool = False
    # Used when the asset carries no image dimensions
    default_side: int = 400

    def derive(self, **overrides) -> ImageLayout:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone


FLOAT_RIGHT = ImageLayout()
CENTERED = FLOAT_RIGHT.derive(
    max_side=600,
    style="max-width:100%;height:auto;display:block;margin:1rem auto;",
    centered=True,
)

CODE_STYLE = (
    "background-color: #f1f5f9; padding: 0.125rem 0.25rem; "
    "border-radius: 0.25rem; font-family: monospace;"
)
QUOTE_STYLE = (
    "border-left:4px solid #cbd5e1;margin:1.5rem 0;padding:0.5rem 1rem;"
    "color:#475569;font-style:italic;"
)
HEADING_SPACING_STYLE = "margin-top:2rem;"
CENTER_WRAPPER_STYLE = "text-align:center;"


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _build_smart_layouts() -> dict[str, ImageLayout]:
    """Position-dependent layouts: landscape openers and closers centered."""
    return {
        "first_landscape": CENTERED,
        "first_portrait": FLOAT_RIGHT,
        "last": CENTERED,
        "middle": FLOAT_RIGHT,
    }


def _build_simple_layouts() -> dict[str, ImageLayout]:
    """Every image floats right."""
    return {"image": FLOAT_RIGHT}


def _build_card_layouts() -> dict[str, ImageLayout]:
    """Small centered, non-floating images for card bodies."""
    return {
        "image": FLOAT_RIGHT.derive(
            max_side=300,
            default_side=300,
            style="max-width:100%;height:auto;margin:1rem 0;",
        ),
    }


_PRESET_BUILDERS = {
    "smart": _build_smart_layouts,
    "simple": _build_simple_layouts,
    "card": _build_card_layouts,
}


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Resolve image layouts for a named preset.

    Usage::

        sm = StyleManager("card")
        layout = sm.get_layout("image")
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "smart") -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self._layouts: dict[str, ImageLayout] = _PRESET_BUILDERS[preset]()

    def get_layout(self, name: str) -> ImageLayout:
        """Get a layout by name, falling back to the preset's first layout."""
        if name in self._layouts:
            return self._layouts[name]
        return next(iter(self._layouts.values()))
