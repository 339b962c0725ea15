"""Tests for namespacing internal ids."""

from __future__ import annotations

import pytest

from sprite_ids import collect_references, rewrite_identifiers, rewrite_ids
from sprite_svg import parse_markup
from tests.conftest import GRADIENT_SVG


def test_referenced_id_is_prefixed():
    result = rewrite_identifiers(GRADIENT_SVG, "flag")
    assert 'id="flag-grad1"' in result
    assert 'fill="url(#flag-grad1)"' in result
    assert 'id="grad1"' not in result


def test_unreferenced_id_is_dropped():
    result = rewrite_identifiers(GRADIENT_SVG, "flag")
    assert "unused" not in result


def test_rename_map():
    root = parse_markup(GRADIENT_SVG)
    assert rewrite_ids(root, "flag") == {"grad1": "flag-grad1"}


def test_collect_references():
    root = parse_markup(
        '<svg><path fill="url(#a)" style="stroke:url( \'#b\' )"/><use href="#c"/>'
        "<style>.x{mask:url(#d)}</style></svg>"
    )
    assert collect_references(root) == {"a", "b", "c", "d"}


def test_href_reference():
    svg = '<svg><path id="shape" d="M0 0"/><use href="#shape"/></svg>'
    result = rewrite_identifiers(svg, "icon")
    assert '<path id="icon-shape" d="M0 0"/>' in result
    assert '<use href="#icon-shape"/>' in result


def test_xlink_href_reference():
    svg = (
        '<svg xmlns:xlink="http://www.w3.org/1999/xlink">'
        '<path id="shape"/><use xlink:href="#shape"/></svg>'
    )
    result = rewrite_identifiers(svg, "icon")
    assert 'id="icon-shape"' in result
    assert 'xlink:href="#icon-shape"' in result


def test_quoted_url_keeps_its_quotes():
    svg = "<svg><clipPath id=\"c\"/><g style=\"clip-path:url('#c')\"/></svg>"
    result = rewrite_identifiers(svg, "icon")
    assert "url('#icon-c')" in result


def test_undeclared_reference_is_left_alone():
    svg = '<svg><path fill="url(#elsewhere)"/></svg>'
    result = rewrite_identifiers(svg, "icon")
    assert 'fill="url(#elsewhere)"' in result


def test_same_internal_id_in_two_icons_stays_paired():
    first = rewrite_identifiers(GRADIENT_SVG, "one")
    second = rewrite_identifiers(GRADIENT_SVG, "two")
    assert 'id="one-grad1"' in first and "url(#one-grad1)" in first
    assert 'id="two-grad1"' in second and "url(#two-grad1)" in second


def test_symbol_id_required():
    with pytest.raises(ValueError):
        rewrite_identifiers(GRADIENT_SVG, "")
