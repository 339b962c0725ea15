#!python3
import argparse
import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional, Set, Tuple

from tqdm import tqdm

from sprite_css import format_declarations, inline_styles, parse_declarations
from sprite_ids import rewrite_ids
from sprite_pack import pack_sprite, to_symbol, write_manifest
from sprite_svg import normalize_namespaces, optimize_svg, parse_markup, transform_element
from sprite_utils import (
    DEFAULT_BATCH_SIZE,
    NAME_SEPARATOR,
    SVG_SUFFIX,
    Icon,
    SpriteConfig,
    SpriteEntry,
    SpriteResult,
    get_sprite_name,
    get_symbol_id,
    setup_logging,
)

logger = logging.getLogger(__name__)

INPUT_DIR = Path("assets/svg")
OUTPUT_DIR = Path("assets/sprite/gen")


def discover_icons(input_root: Path) -> List[Path]:
    """All *.svg files under input_root, ordered by relative path.

    The suffix match is case-sensitive on every platform. A missing root
    yields an empty list.
    """
    if not input_root.is_dir():
        return []
    paths = [
        p
        for p in input_root.rglob(f"*{SVG_SUFFIX}")
        if p.name.endswith(SVG_SUFFIX) and p.is_file()
    ]
    return sorted(paths, key=lambda p: p.relative_to(input_root).as_posix())


def build_icons(paths: List[Path], input_root: Path, default_sprite: str) -> List[Icon]:
    icons = []
    taken: Set[str] = set()

    for path in paths:
        relative = PurePosixPath(path.relative_to(input_root).as_posix())
        base = get_symbol_id(relative)

        symbol_id, n = base, 1
        while symbol_id in taken:
            n += 1
            symbol_id = f"{base}{NAME_SEPARATOR}{n}"
        if symbol_id != base:
            logger.warning(
                "Symbol id %s of %s is already taken, using %s", base, relative, symbol_id
            )
        taken.add(symbol_id)

        icons.append(
            Icon(
                path=path,
                relative_path=relative,
                sprite=get_sprite_name(relative, default_sprite),
                symbol_id=symbol_id,
            )
        )
    return icons


def group_icons(icons: List[Icon]) -> Dict[str, List[Icon]]:
    groups: Dict[str, List[Icon]] = {}
    for icon in icons:
        groups.setdefault(icon.sprite, []).append(icon)
    return groups


def process_icon(
    markup: str, symbol_id: str, optimizer: Optional[Callable[[str], str]] = None
) -> Tuple[str, str]:
    """Run one icon through the full pipeline, returning (body, view_box).

    Order matters: class rules are inlined before ids are rewritten, and both
    happen before the outer <svg> is stripped.
    """
    if not symbol_id:
        raise ValueError("SVG content and symbol id are required")
    if optimizer is not None:
        markup = optimizer(markup)

    root = parse_markup(markup)
    normalize_namespaces(root)

    own_style = parse_declarations(root.get("style", ""))
    inline_styles(root)
    rewrite_ids(root, symbol_id)

    # The root's own style is dropped with it; what class rules put there and a
    # referenced root id move to the <g> wrapper.
    wrapper_attrs = {}
    if root.get("id"):
        wrapper_attrs["id"] = root.get("id")
    class_style = {
        prop: value
        for prop, value in parse_declarations(root.get("style", "")).items()
        if prop not in own_style
    }
    if class_style:
        wrapper_attrs["style"] = format_declarations(class_style)
    return transform_element(root, wrapper_attrs)


def _get_optimizer(config: SpriteConfig) -> Optional[Callable[[str], str]]:
    if not config.optimize:
        return None
    return config.optimizer or optimize_svg


async def compile_icon(
    icon: Icon, optimizer: Optional[Callable[[str], str]]
) -> Optional[str]:
    try:
        markup = await asyncio.to_thread(icon.path.read_text, encoding="utf-8-sig")
        body, view_box = process_icon(markup, icon.symbol_id, optimizer)
    except (OSError, ValueError) as e:
        logger.warning("Skipped %s: %s", icon.relative_path, e)
        return None
    return to_symbol(body, icon.symbol_id, view_box)


async def compile_sprite(
    name: str, icons: List[Icon], config: SpriteConfig, pbar: tqdm
) -> Optional[Tuple[str, SpriteEntry, str]]:
    optimizer = _get_optimizer(config)
    symbols: List[str] = []
    symbol_ids: List[str] = []

    for start in range(0, len(icons), config.batch_size):
        batch = icons[start : start + config.batch_size]
        compiled = await asyncio.gather(*(compile_icon(icon, optimizer) for icon in batch))
        for icon, symbol in zip(batch, compiled):
            if symbol is None:
                continue
            symbols.append(symbol)
            symbol_ids.append(icon.symbol_id)
        pbar.update(len(batch))

    if not symbols:
        logger.warning("Sprite %s has no usable icons, skipping", name)
        return None

    content = pack_sprite(symbols)
    path = config.output_root / f"{name}{SVG_SUFFIX}"
    try:
        await asyncio.to_thread(config.output_root.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_text, content, encoding="utf-8")
    except OSError as e:
        logger.error("Could not write sprite %s to %s: %s", name, path, e)
        return None

    logger.debug("Wrote sprite %s with %d symbols to %s", name, len(symbols), path)
    return name, SpriteEntry(path=str(path), symbols=symbol_ids), content


async def assemble(config: SpriteConfig) -> SpriteResult:
    """Compile every icon under config.input_root into one sprite per directory.

    Always recomputes from disk. Failures are contained: a broken icon is left
    out of its sprite, and a sprite that cannot be written is left out of the
    result.
    """
    result = SpriteResult()

    try:
        paths = await asyncio.to_thread(discover_icons, config.input_root)
    except OSError as e:
        logger.error("Could not scan %s: %s", config.input_root, e)
        return result
    if not paths:
        logger.info("No SVG icons found in %s", config.input_root)
        return result

    icons = build_icons(paths, config.input_root, config.default_sprite)
    groups = group_icons(icons)

    with tqdm(
        total=len(icons), desc="Compiling icons", unit=" icons", disable=not config.progress
    ) as pbar:
        compiled = await asyncio.gather(
            *(compile_sprite(name, members, config, pbar) for name, members in groups.items())
        )

    for item in compiled:
        if item is None:
            continue
        name, entry, content = item
        result.sprite_map[name] = entry
        result.sprite_content[name] = content

    compiled_count = sum(len(entry.symbols) for entry in result.sprite_map.values())
    if compiled_count < len(icons):
        logger.info(f"Skipped {len(icons) - compiled_count} of {len(icons)} icons.")
    return result


def generate_sprites(config: SpriteConfig) -> SpriteResult:
    return asyncio.run(assemble(config))


def main(args) -> int:
    config = SpriteConfig(
        input_root=args.input.resolve(),
        output_root=args.output.resolve(),
        default_sprite=args.default_sprite,
        optimize=args.optimize,
        batch_size=args.batch_size,
        progress=True,
    )
    result = generate_sprites(config)

    if not result:
        logging.warning(f"No sprites generated from {config.input_root}")
        return 0

    if args.manifest:
        write_manifest(result, args.manifest)
        logging.info(f"Wrote sprite manifest to {args.manifest}")

    for name, entry in sorted(result.sprite_map.items()):
        logging.info(f"Sprite {name}: {len(entry.symbols)} symbols -> {entry.path}")
    return 0


def cli():
    parser = argparse.ArgumentParser(
        description="Compile a directory of SVG icons into one <symbol> sprite per sub-directory."
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=INPUT_DIR,
        help="Directory containing the SVG icons",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=OUTPUT_DIR,
        help="Directory the sprites are written to",
    )
    parser.add_argument(
        "--default-sprite",
        default="icons",
        help="Sprite name for icons directly under the input directory",
    )
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Strip metadata before compiling",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Icons compiled concurrently within one sprite",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Also write the sprite map as JSON to this path",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        status = main(args)
    except ValueError as e:
        parser.error(str(e))
    raise SystemExit(status)


if __name__ == "__main__":
    cli()
