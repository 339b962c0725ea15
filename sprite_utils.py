from dataclasses import dataclass, field
import logging
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional


COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[32m",  # green
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
COLOR_RESET = "\033[0m"

SVG_SUFFIX = ".svg"
NAME_SEPARATOR = "-"
DEFAULT_BATCH_SIZE = 20


class ColorFormatter(logging.Formatter):
    def format(self, record):
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{COLOR_RESET}"
        return super().format(record)


def setup_logging(level: int = logging.INFO):
    handler = logging.StreamHandler()
    handler.setFormatter(ColorFormatter("%(levelname)s %(name)s: %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(level)


def flatten_path(path: PurePosixPath) -> str:
    """Join the parts of a relative path with NAME_SEPARATOR ("nav/arrows" -> "nav-arrows")."""
    return NAME_SEPARATOR.join(path.parts)


def get_sprite_name(relative: PurePosixPath, default_sprite: str) -> str:
    """Icons directly under the input root go to the default sprite."""
    parent = relative.parent
    if parent == PurePosixPath("."):
        return default_sprite
    return flatten_path(parent)


def get_symbol_id(relative: PurePosixPath) -> str:
    return flatten_path(relative.with_suffix(""))


@dataclass(frozen=True)
class Icon:
    path: Path
    relative_path: PurePosixPath
    sprite: str
    symbol_id: str

    def __post_init__(self):
        if not self.symbol_id:
            raise ValueError(f"Icon symbol id must not be empty (path={self.path})")
        if not self.sprite:
            raise ValueError(f"Icon sprite name must not be empty (path={self.path})")


@dataclass(frozen=True)
class SpriteConfig:
    input_root: Path
    output_root: Path
    default_sprite: str = "icons"
    optimize: bool = False
    # Replaces the built-in optimizer when set; only used with optimize=True.
    optimizer: Optional[Callable[[str], str]] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    progress: bool = False

    def __post_init__(self):
        if not self.default_sprite:
            raise ValueError("Default sprite name must not be empty")
        if "/" in self.default_sprite or "\\" in self.default_sprite:
            raise ValueError(
                f"Default sprite name must not contain path separators: {self.default_sprite}"
            )
        if self.batch_size < 1:
            raise ValueError(f"Batch size must be positive, got {self.batch_size}")


@dataclass
class SpriteEntry:
    path: str
    symbols: List[str]


@dataclass
class SpriteResult:
    sprite_map: Dict[str, SpriteEntry] = field(default_factory=dict)
    sprite_content: Dict[str, str] = field(default_factory=dict)

    def __bool__(self):
        return bool(self.sprite_map)
