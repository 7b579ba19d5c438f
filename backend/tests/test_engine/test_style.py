"""Tests for style profiles and enforcement."""

import pytest

from iconsmith.engine.style import (
    FEATHER_RULES,
    GENERATION_PROFILE,
    INGESTION_PROFILE,
    StyleProfile,
    default_profile,
    enforce_style,
    format_compliance,
    profile_from_manifest,
)
from iconsmith.engine.stages.s1_sanitize import sanitize_svg
from iconsmith.engine.stages.s3_normalize import normalize_styles
from iconsmith.models.icon import ProcessingMode
from tests.conftest import ARCH_SVG, CIRCLE_SVG, SMILEY_SVG

OVERRIDE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <path d="M4 4h16" fill="none" stroke-width="3"/>
  <path d="M4 8h16" fill="none" stroke="none"/>
</svg>'''


def test_compliant_icon_unchanged():
    svg, report = enforce_style(ARCH_SVG, FEATHER_RULES)
    assert svg == ARCH_SVG
    assert report.passed
    assert report.score == 100
    assert report.changes == ()


def test_missing_child_fill_is_fixed():
    svg, report = enforce_style(CIRCLE_SVG, FEATHER_RULES)
    assert not report.passed
    assert report.score == 80
    assert [v.rule for v in report.errors] == ["element-fill"]
    assert '<circle cx="12" cy="12" r="10" fill="none"/>' in svg

    _, again = enforce_style(svg, FEATHER_RULES)
    assert again.passed


def test_child_override_is_rewritten():
    svg, report = enforce_style(OVERRIDE_SVG, GENERATION_PROFILE)
    assert [v.rule for v in report.violations] == ["stroke-width"]
    assert [(c.element, c.before, c.after) for c in report.changes] == [("path", "3", "2")]
    assert 'stroke-width="3"' not in svg
    # stroke="none" on a child is left alone
    assert 'stroke="none"' in svg


def test_root_attributes_added():
    bare = '<svg xmlns="http://www.w3.org/2000/svg"><path d="M4 4h16" fill="none"/></svg>'
    svg, report = enforce_style(bare, GENERATION_PROFILE)
    rules = {v.rule for v in report.violations}
    assert {"stroke-width", "stroke-linecap", "stroke-linejoin", "stroke", "viewBox", "element-fill"} <= rules
    assert 'viewBox="0 0 24 24"' in svg
    assert 'stroke="currentColor"' in svg
    assert report.score == 0


def test_warning_rules_do_not_fail():
    _, report = enforce_style(SMILEY_SVG, StyleProfile(max_path_complexity=1))
    assert report.passed
    assert report.score == 95
    assert report.warnings[0].rule == "path-complexity"


def test_missing_root():
    svg, report = enforce_style("<path/>", FEATHER_RULES)
    assert svg == "<path/>"
    assert report.score == 0
    assert not report.passed


def test_manifest_profile_keys():
    camel = profile_from_manifest({"strokeWidth": "1.5", "viewBoxSize": 24}, "generate")
    snake = profile_from_manifest({"stroke_width": 1.5, "view_box_size": "24"}, ProcessingMode.GENERATE)
    assert camel.stroke_width == snake.stroke_width == 1.5
    assert camel.view_box == "0 0 24 24"
    assert camel.stroke_color == "currentColor"
    assert not camel.allow_path_merging
    assert profile_from_manifest({}, "ingest").allow_path_merging


def test_default_profiles():
    assert default_profile("generate") is GENERATION_PROFILE
    assert default_profile(ProcessingMode.INGEST) is INGESTION_PROFILE
    assert not INGESTION_PROFILE.has_enforcement_rules


def test_format_compliance():
    _, report = enforce_style(CIRCLE_SVG, FEATHER_RULES)
    text = format_compliance(report)
    assert text.startswith("NON-COMPLIANT (Score: 80/100)")
    assert "circle.fill" in text


def test_sanitize_strips_active_content():
    svg = '<svg onload="x()"><script>alert(1)</script><a href="javascript:x()"><path d="M0 0h1"/></a></svg>'
    clean, notes = sanitize_svg(svg)
    assert "script" not in clean
    assert "onload" not in clean
    assert "javascript" not in clean
    assert "[sanitize] removed 1 script element(s)" in notes
    assert len(notes) == 3


@pytest.mark.parametrize(
    "svg",
    [
        '<svg/onload=alert(1)><path d="M0 0h1"/></svg>',
        '<svg viewBox="0 0 24 24" onclick=run()><path d="M0 0h1"/></svg>',
        '<svg><path d="M0 0h1" onmouseover=x/></svg>',
        '<svg><a href="&#106;avascript:x()"><path d="M0 0h1"/></a></svg>',
        '<svg><a xlink:href=" java\tscript:x()"><path d="M0 0h1"/></a></svg>',
    ],
)
def test_sanitize_catches_evasive_handlers_and_links(svg):
    clean, notes = sanitize_svg(svg)
    assert "alert" not in clean
    assert "run()" not in clean
    assert "on" not in clean.replace("M0 0h1", "")
    assert "script" not in clean.lower()
    assert '<path d="M0 0h1"' in clean
    assert notes


def test_sanitize_keeps_safe_links():
    svg = '<svg><a href="#badge"><path d="M0 0h1"/></a></svg>'
    assert sanitize_svg(svg) == (svg, [])


def test_normalize_folds_styles():
    svg = '<svg><path d="M0 0h1" fill="blue" style="fill:red; stroke-width: 3; cursor: pointer"/></svg>'
    out, notes = normalize_styles(svg)
    assert "style=" not in out
    assert 'fill="red"' in out
    assert 'stroke-width="3"' in out
    assert notes == ["[normalize] dropped non-presentation style properties: cursor"]
