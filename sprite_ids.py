"""Namespace internal ids so icons can share one sprite document.

An id is kept only if something inside the same icon points at it, through
url(#id) in any attribute or style text, or through an href="#id" link. Kept
ids become "<symbol id>-<id>" along with every reference to them; all other
ids are removed.
"""

import logging
import re
from typing import Dict, Set

from lxml import etree

from sprite_svg import localname, parse_markup, to_markup

logger = logging.getLogger(__name__)

URL_REF_RE = re.compile(r"url\(\s*(['\"]?)#([^)'\"\s]+)\1\s*\)")


def _is_href(name: str) -> bool:
    return etree.QName(name).localname == "href"


def _text_nodes(root):
    # url() references inside <style> text
    for elem in root.iter():
        if isinstance(elem.tag, str) and localname(elem) == "style" and elem.text:
            yield elem


def collect_references(root) -> Set[str]:
    referenced: Set[str] = set()
    for elem in root.iter():
        if not isinstance(elem.tag, str):
            continue
        for name, value in elem.attrib.items():
            referenced.update(m.group(2) for m in URL_REF_RE.finditer(value))
            if _is_href(name) and value.startswith("#"):
                referenced.add(value[1:])
    for style in _text_nodes(root):
        referenced.update(m.group(2) for m in URL_REF_RE.finditer(style.text))
    return referenced


def _rewrite_urls(value: str, renames: Dict[str, str]) -> str:
    def replace(m):
        target = renames.get(m.group(2))
        if target is None:
            return m.group(0)
        quote = m.group(1)
        return f"url({quote}#{target}{quote})"

    return URL_REF_RE.sub(replace, value)


def rewrite_ids(root, symbol_id: str) -> Dict[str, str]:
    """Rename functional ids and drop the rest. Returns the {old: new} renames."""
    declared = {
        elem.get("id")
        for elem in root.iter()
        if isinstance(elem.tag, str) and elem.get("id")
    }
    renames = {
        old: f"{symbol_id}-{old}" for old in declared & collect_references(root)
    }

    dropped = 0
    for elem in root.iter():
        if not isinstance(elem.tag, str):
            continue

        old = elem.get("id")
        if old is not None:
            if old in renames:
                elem.set("id", renames[old])
            else:
                del elem.attrib["id"]
                dropped += 1

        for name, value in list(elem.attrib.items()):
            new = _rewrite_urls(value, renames)
            if _is_href(name) and new.startswith("#") and new[1:] in renames:
                new = "#" + renames[new[1:]]
            if new != value:
                elem.set(name, new)

    for style in _text_nodes(root):
        style.text = _rewrite_urls(style.text, renames)

    logger.debug(
        "%s: renamed %d ids, dropped %d unreferenced", symbol_id, len(renames), dropped
    )
    return renames


def rewrite_identifiers(markup: str, symbol_id: str) -> str:
    if not symbol_id:
        raise ValueError("Symbol id is required")
    root = parse_markup(markup)
    rewrite_ids(root, symbol_id)
    return to_markup(root)
