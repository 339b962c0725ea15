"""Markup transformer: one icon document in, a symbol body plus its view box out.

Icons are parsed with lxml. Foreign-namespace elements and attributes (editor
metadata) are dropped and SVG tags lose their namespace, so the body can be
concatenated under a single sprite root that declares the SVG namespace once.
"""

import logging
import math
import re
from typing import Dict, Optional, Tuple

from lxml import etree

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
VIEWBOX_RE = re.compile(rf"^\s*{NUMBER}(?:(?:\s*,\s*|\s+){NUMBER}){{3}}\s*$")
LEADING_NUMBER_RE = re.compile(rf"^\s*({NUMBER})")
XML_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>")

DEFAULT_VIEWBOX = "0 0 24 24"
ROOT_STRIP_ATTRS = ("width", "height", "style")

# Root attributes that affect rendering and survive on a <g> wrapper.
PRESENTATION_ATTRS = (
    "fill",
    "fill-opacity",
    "fill-rule",
    "clip-rule",
    "stroke",
    "stroke-width",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-miterlimit",
    "stroke-dasharray",
    "stroke-dashoffset",
    "stroke-opacity",
    "opacity",
    "color",
    "font-family",
    "font-size",
    "font-weight",
    "text-anchor",
)

OPTIMIZE_DROP_ELEMENTS = ("title", "desc", "metadata")


class InvalidSvgError(ValueError):
    """Markup that cannot be parsed or whose root is not an <svg> element."""


def localname(elem) -> str:
    return etree.QName(elem).localname


def parse_markup(markup: str):
    if not markup or not isinstance(markup, str):
        raise ValueError("Invalid SVG content provided")

    parser = etree.XMLParser(remove_comments=True, remove_pis=True, no_network=True)
    try:
        # Drop the declaration so lxml accepts the already-decoded text.
        root = etree.fromstring(XML_DECL_RE.sub("", markup, count=1), parser)
    except etree.XMLSyntaxError as e:
        raise InvalidSvgError(f"Could not parse SVG: {e}") from e

    if localname(root) != "svg":
        raise InvalidSvgError(f"Root element is <{localname(root)}>, expected <svg>")
    return root


def to_markup(elem) -> str:
    return etree.tostring(elem, encoding="unicode", with_tail=False)


def inner_markup(elem) -> str:
    """Serialize the children of elem without its own start and end tags."""
    markup = to_markup(elem)
    if markup.endswith("/>"):
        return ""
    return markup[markup.index(">") + 1 : markup.rindex("</")]


def remove_element(elem):
    """Detach elem from its parent, keeping any non-blank tail text in place."""
    parent = elem.getparent()
    if parent is None:
        return
    tail = elem.tail
    if tail and tail.strip():
        previous = elem.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(elem)


def normalize_namespaces(root):
    for elem in list(root.iter()):
        # Skip entity references; detached subtrees are harmless to visit.
        if not isinstance(elem.tag, str):
            continue

        qname = etree.QName(elem)
        if qname.namespace not in (None, SVG_NS):
            remove_element(elem)
            continue
        elem.tag = qname.localname

        for name in list(elem.attrib.keys()):
            attr = etree.QName(name)
            if attr.namespace is None:
                continue
            value = elem.attrib.pop(name)
            # xlink:href and friends become their SVG 2 plain forms
            if attr.namespace == XLINK_NS and attr.localname not in elem.attrib:
                elem.set(attr.localname, value)

    etree.cleanup_namespaces(root)


def parse_length(value: Optional[str]) -> Optional[float]:
    """Leading-number parse ("16px" -> 16.0); None unless positive and finite."""
    if not value:
        return None
    m = LEADING_NUMBER_RE.match(value)
    if not m:
        return None
    number = float(m.group(1))
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def format_number(number: float) -> str:
    return str(int(number)) if number.is_integer() else repr(number)


def compute_view_box(root) -> str:
    view_box = root.get("viewBox")
    if view_box and VIEWBOX_RE.match(view_box):
        return view_box
    if view_box:
        logger.debug("Ignoring malformed viewBox %r", view_box)

    width = parse_length(root.get("width"))
    height = parse_length(root.get("height"))
    if width and height:
        return f"0 0 {format_number(width)} {format_number(height)}"

    return DEFAULT_VIEWBOX


def transform_element(root, wrapper_attrs: Optional[Dict[str, str]] = None) -> Tuple[str, str]:
    """Transform a parsed, namespace-normalized <svg> root in place.

    Returns (body, view_box). The root is consumed: its sizing attributes are
    removed and, when it carries presentation attributes or wrapper_attrs are
    given, it is turned into the <g> that wraps the body.
    """
    view_box = compute_view_box(root)
    for name in ROOT_STRIP_ATTRS:
        root.attrib.pop(name, None)

    presentation = {
        name: root.get(name) for name in PRESENTATION_ATTRS if root.get(name) is not None
    }
    presentation.update(wrapper_attrs or {})
    if presentation:
        root.attrib.clear()
        for name, value in presentation.items():
            root.set(name, value)
        root.tag = "g"
        body = to_markup(root)
    else:
        body = inner_markup(root)

    return body.strip(), view_box


def transform(markup: str, symbol_id: str) -> Tuple[str, str]:
    if not symbol_id:
        raise ValueError("SVG content and symbol id are required")
    root = parse_markup(markup)
    normalize_namespaces(root)
    return transform_element(root)


def optimize_svg(markup: str) -> str:
    """Built-in pre-transform cleanup: metadata elements and -inkscape style properties."""
    root = parse_markup(markup)

    for elem in list(root.iter()):
        if isinstance(elem.tag, str) and localname(elem) in OPTIMIZE_DROP_ELEMENTS:
            remove_element(elem)

    for elem in root.iter():
        if not isinstance(elem.tag, str) or "style" not in elem.attrib:
            continue
        style_parts = [
            part.strip()
            for part in elem.attrib["style"].split(";")
            if part.strip() and not part.strip().startswith("-inkscape")
        ]
        if style_parts:
            elem.attrib["style"] = ";".join(style_parts)
        else:
            del elem.attrib["style"]

    return to_markup(root)
