"""Inline simple class rules from embedded <style> blocks.

Only selectors made of plain class names (".a" or ".a, .b") are understood.
Anything else is skipped, and the style blocks are removed either way.
"""

import logging
import re
from typing import Dict, Iterable

from sprite_svg import localname, parse_markup, remove_element, to_markup

logger = logging.getLogger(__name__)

CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
# @media/@supports blocks (one level of nesting) and @import-style statements
AT_RULE_BLOCK_RE = re.compile(r"@[^{};]+\{(?:[^{}]*\{[^{}]*\})*[^{}]*\}")
AT_RULE_STATEMENT_RE = re.compile(r"@[^{};]+;")
RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
CLASS_SELECTOR_RE = re.compile(r"^\.(-?[_a-zA-Z][\w-]*)$")

Declarations = Dict[str, str]


def parse_declarations(text: str) -> Declarations:
    declarations: Declarations = {}
    for part in text.split(";"):
        prop, sep, value = part.partition(":")
        prop, value = prop.strip(), value.strip()
        if sep and prop and value:
            declarations[prop] = value
    return declarations


def format_declarations(declarations: Declarations) -> str:
    return ";".join(f"{prop}:{value}" for prop, value in declarations.items())


def parse_rules(css: str) -> Dict[str, Declarations]:
    """Map class name -> declarations, in first-appearance order.

    A class that appears in several rules gets their declarations merged,
    later ones winning per property.
    """
    css = CSS_COMMENT_RE.sub("", css)
    css = AT_RULE_BLOCK_RE.sub("", css)
    css = AT_RULE_STATEMENT_RE.sub("", css)

    rules: Dict[str, Declarations] = {}
    for m in RULE_RE.finditer(css):
        selectors = [s.strip() for s in m.group(1).split(",")]
        matches = [CLASS_SELECTOR_RE.match(s) for s in selectors]
        if not all(matches):
            logger.debug("Skipping unsupported selector %r", m.group(1).strip())
            continue

        declarations = parse_declarations(m.group(2))
        for match in matches:
            rules.setdefault(match.group(1), {}).update(declarations)
    return rules


def _style_elements(root) -> list:
    return [
        elem
        for elem in root.iter()
        if isinstance(elem.tag, str) and localname(elem) == "style"
    ]


def _remove_style_block(style):
    container = style.getparent()
    remove_element(style)
    # A <defs> left holding nothing but whitespace goes too.
    if (
        container is not None
        and localname(container) == "defs"
        and len(container) == 0
        and not (container.text or "").strip()
    ):
        remove_element(container)


def _apply_rules(elements: Iterable, rules: Dict[str, Declarations]):
    for elem in elements:
        if not isinstance(elem.tag, str):
            continue
        classes = elem.get("class", "").split()
        matched = [name for name in rules if name in classes]
        if not matched:
            continue

        merged: Declarations = {}
        for name in matched:
            merged.update(rules[name])
        # Existing inline declarations take precedence over class rules.
        merged.update(parse_declarations(elem.get("style", "")))
        if merged:
            elem.set("style", format_declarations(merged))

        remaining = [c for c in classes if c not in rules]
        if remaining:
            elem.set("class", " ".join(remaining))
        else:
            del elem.attrib["class"]


def inline_styles(root) -> bool:
    """Inline and drop the <style> blocks under root. Returns False if there were none."""
    styles = _style_elements(root)
    if not styles:
        return False

    rules: Dict[str, Declarations] = {}
    for style in styles:
        for name, declarations in parse_rules(style.text or "").items():
            rules.setdefault(name, {}).update(declarations)
        _remove_style_block(style)

    if rules:
        _apply_rules(list(root.iter()), rules)
    return True


def extract_and_inline(markup: str) -> str:
    if "<style" not in markup:
        return markup
    root = parse_markup(markup)
    inline_styles(root)
    return to_markup(root)
