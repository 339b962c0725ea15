"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from sprite_utils import SpriteConfig


# Sample icons

CIRCLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">
  <circle cx="12" cy="12" r="10"/>
</svg>'''

SIZED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16"><rect x="2" y="2" width="12" height="12"/></svg>'''

BARE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg"><path d="M4 4h16v16H4z"/></svg>'''

STYLED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <defs><style>.a{fill:red}</style></defs>
  <path class="a" d="M0 0h24v24H0z"/>
</svg>'''

GRADIENT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 32 32">
  <defs>
    <linearGradient id="grad1"><stop offset="0" stop-color="#000"/></linearGradient>
  </defs>
  <rect id="unused" width="32" height="32" fill="url(#grad1)"/>
</svg>'''

INKSCAPE_SVG = '''<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!-- Created with Inkscape -->
<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:xlink="http://www.w3.org/1999/xlink"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"
     width="48" height="48" viewBox="0 0 48 48">
  <sodipodi:namedview id="namedview1" inkscape:zoom="1"/>
  <title>Inkscape icon</title>
  <path id="shape" inkscape:label="Layer" d="M0 0L48 48" style="-inkscape-font-specification:Sans;stroke:#000"/>
  <use xlink:href="#shape" x="4"/>
</svg>'''


def write_icon(root: Path, relative: str, markup: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(markup, encoding="utf-8")
    return path


@pytest.fixture
def icon_tree(tmp_path: Path) -> Path:
    """icons/arrow.svg at the top level and icons/nav/home.svg one level down."""
    root = tmp_path / "icons"
    write_icon(root, "arrow.svg", BARE_SVG)
    write_icon(root, "nav/home.svg", CIRCLE_SVG)
    return root


@pytest.fixture
def config_for(tmp_path: Path):
    def make(input_root: Path, **kwargs) -> SpriteConfig:
        return SpriteConfig(input_root=input_root, output_root=tmp_path / "out", **kwargs)

    return make
