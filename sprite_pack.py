"""Pack compiled symbols into sprite documents and write the sprite manifest."""

import dataclasses
import html
import json
from pathlib import Path
from typing import Iterable

from sprite_utils import SpriteResult

SPRITE_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" style="display: none;">'
SPRITE_CLOSE = "</svg>"


def to_symbol(body: str, symbol_id: str, view_box: str) -> str:
    if not symbol_id:
        raise ValueError("Symbol id is required")
    return (
        f'<symbol id="{html.escape(symbol_id)}" viewBox="{html.escape(view_box)}">'
        f"{body}</symbol>"
    )


def pack_sprite(symbols: Iterable[str]) -> str:
    lines = [SPRITE_OPEN]
    lines.extend(symbols)
    lines.append(SPRITE_CLOSE)
    return "\n".join(lines)


def write_manifest(result: SpriteResult, output: Path):
    manifest = {
        name: dataclasses.asdict(entry) for name, entry in sorted(result.sprite_map.items())
    }
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
