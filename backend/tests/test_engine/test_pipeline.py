"""Tests for the style pipeline."""

import pytest

from iconsmith.engine import PipelineConfig, StylePipeline, format_process_result
from iconsmith.engine.registry import StageRegistry, StageSpec
from iconsmith.errors import InvalidIconError
from iconsmith.models.icon import ProcessingMode
from tests.conftest import ARCH_SVG, CIRCLE_SVG, GENERATED_SVG, OVERFLOW_SVG


@pytest.fixture(scope="module")
def pipeline():
    return StylePipeline()


def test_stage_order_per_mode(pipeline):
    assert pipeline.stages("generate") == ["sanitize", "repair", "normalize", "enforce", "optimize", "validate"]
    assert pipeline.stages(ProcessingMode.INGEST) == ["sanitize", "normalize", "enforce", "optimize", "validate"]


def test_compliant_icon_passes_unchanged(pipeline):
    result = pipeline.process(ARCH_SVG)
    assert result.ok
    assert not result.modified
    assert result.svg == ARCH_SVG
    assert result.compliance.score == 100
    assert result.validation.valid
    assert len(result.stages_run) == 6


def test_generated_icon_is_cleaned(pipeline):
    result = pipeline.process(GENERATED_SVG, "generate")
    assert result.modified
    svg = result.svg
    assert "<script" not in svg
    assert "onload" not in svg
    assert "style=" not in svg
    assert 'stroke-width="2"' in svg
    assert 'stroke="currentColor"' in svg
    assert 'fill="red"' not in svg
    assert 'fill="blue"' not in svg
    assert "<rect" in svg
    assert not result.compliance.passed
    assert any(w.startswith("[sanitize]") for w in result.warnings)


def test_pipeline_output_is_stable(pipeline):
    once = pipeline.process(GENERATED_SVG).svg
    twice = pipeline.process(once)
    assert twice.svg == once
    assert not twice.modified


def test_overflow_fixed_at_the_end(pipeline):
    result = pipeline.process(OVERFLOW_SVG)
    assert not result.validation.valid
    assert 'd="M2 12 h20"' in result.svg


def test_ingest_skips_enforcement(pipeline):
    result = pipeline.process(CIRCLE_SVG, "ingest")
    assert result.compliance is None
    assert "repair" not in result.stages_run


def test_manifest_profile(pipeline):
    result = pipeline.process_with_manifest(CIRCLE_SVG, {"strokeWidth": 1.5, "viewBoxSize": 24})
    assert 'stroke-width="1.5"' in result.svg
    assert "stroke-width" in {v.rule for v in result.compliance.violations}


@pytest.mark.parametrize("svg", ["not an icon", '<svg viewBox="0 0 24 24"></svg>'])
def test_invalid_input_raises(pipeline, svg):
    with pytest.raises(InvalidIconError):
        pipeline.process(svg)


def test_batch_isolates_failures(pipeline):
    results = pipeline.process_batch([CIRCLE_SVG, "not an icon", ARCH_SVG])
    assert [r.ok for r in results] == [True, False, True]
    assert results[1].svg == "not an icon"
    assert "no <svg> root" in results[1].error


def test_failing_stage_keeps_previous_state():
    def boom(state, profile):
        raise RuntimeError("kaput")

    def mark(state, profile):
        return state, ["marked"]

    reg = StageRegistry()
    reg.register(StageSpec(id="boom", fn=boom))
    reg.register(StageSpec(id="mark", fn=mark))
    pipeline = StylePipeline(reg, PipelineConfig(generate_stages=["boom", "mark"], ingest_stages=["mark"]))

    result = pipeline.process(CIRCLE_SVG)
    assert result.svg == CIRCLE_SVG
    assert result.stages_run == ("mark",)
    assert result.warnings == ("[boom] stage failed: kaput", "marked")


def test_invalid_configuration_fails_fast():
    with pytest.raises(ValueError):
        StylePipeline(config=PipelineConfig(generate_stages=["enforce", "validate"]))


def test_format_process_result(pipeline):
    text = format_process_result(pipeline.process(CIRCLE_SVG))
    assert text.startswith("Processed: modified=True")
    assert "sanitize > repair" in text


class _Tagging:
    def __init__(self, tag):
        self.tag = tag

    def optimize(self, svg, profile):
        return svg.replace("<svg ", f'<svg data-opt="{self.tag}" ', 1)


def test_each_pipeline_uses_its_own_optimizer():
    first = StylePipeline(optimizer=_Tagging("a"))
    second = StylePipeline(optimizer=_Tagging("b"))
    assert 'data-opt="a"' in first.process(ARCH_SVG).svg
    assert 'data-opt="b"' in second.process(ARCH_SVG).svg
    assert 'data-opt=' not in StylePipeline().process(ARCH_SVG).svg
