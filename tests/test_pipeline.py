"""Tests for dfdgen.pipeline."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from dfdgen.config import ClassifierConfig, DFDGenConfig
from dfdgen.models import BINDING_OBJECT, ROLE_FUNCTION, AtomDefinition, NotAnalyzable
from dfdgen.pipeline import DFDPipeline, merge_atoms
from dfdgen.processors import ProcessorRegistry
from dfdgen.processors.base import Processor, ProcessorMetadata, ProcessorResult
from dfdgen.processors.custom import CustomHookProcessor
from dfdgen.scanners import AtomScanner
from tests._fixtures.components import component, hook, only


class ExplodingProcessor(Processor):
    metadata = ProcessorMetadata(id="exploding", library="test", hook_names=("useBoom",), priority=90)

    def process(self, invocation, session) -> ProcessorResult:
        raise ValueError("cannot handle")


def _navigation_component():
    return component(
        hooks=[
            hook("usePathname", "pathname", library="next/navigation"),
            hook("useSearchParams", "params", library="next/navigation", line=2),
        ]
    )


def test_each_run_starts_a_fresh_session(pipeline: DFDPipeline) -> None:
    analysis = _navigation_component()

    first = asyncio.run(pipeline.execute(analysis))
    second = asyncio.run(pipeline.execute(analysis))

    assert first.session is not second.session
    assert len(first.graph.nodes_labelled("URL: Input")) == 1
    assert len(second.graph.nodes_labelled("URL: Input")) == 1
    assert first.graph.to_dict() == second.graph.to_dict()
    assert not any(invocation.classified for invocation in analysis.hooks)


def test_concurrent_analyses_do_not_share_state(pipeline: DFDPipeline) -> None:
    async def _both():
        return await asyncio.gather(
            pipeline.analyze(_navigation_component()),
            pipeline.analyze(component(name="Other", hooks=[hook("usePathname", "path", library="next/navigation")])),
        )

    first, second = asyncio.run(_both())

    assert first.component == "Demo"
    assert second.component == "Other"
    first_url = only(first, "URL: Input")
    second_url = only(second, "URL: Input")
    assert first_url is not second_url
    first_url.metadata["seen"] = True
    assert "seen" not in second_url.metadata
    assert len(second.edges) == 1
    assert all(edge.source in second and edge.target in second for edge in second.edges)


def test_processor_fault_does_not_abort_analysis() -> None:
    pipeline = DFDPipeline(
        registry_factory=lambda: ProcessorRegistry([ExplodingProcessor(), CustomHookProcessor()]),
        atom_scanner=AtomScanner(enabled=False),
    )
    analysis = component(hooks=[hook("useBoom", "value"), hook("useCounter", "count", binding=BINDING_OBJECT, line=2)])

    run = asyncio.run(pipeline.execute(analysis))

    assert [outcome.handled for outcome in run.outcomes] == [False, True]
    assert run.session.faults[0].processor_id == "exploding"
    assert only(run.graph, "useCounter").metadata["processor"] == "custom-hook"


def test_config_extends_naming_heuristic(tmp_path: Path) -> None:
    config = DFDGenConfig(root=tmp_path, classifier=ClassifierConfig(function_prefixes=["apply"]))
    pipeline = DFDPipeline(config, atom_scanner=AtomScanner(enabled=False))
    analysis = component(hooks=[hook("useFilters", "filters", "applyFilter", binding=BINDING_OBJECT)])

    node = only(pipeline.run(analysis), "useFilters")

    assert node.metadata["function_values"] == ["applyFilter"]


def test_declared_types_feed_the_classifier(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[hook("usePanel", "visible", binding=BINDING_OBJECT)],
        types={"visible": "() => void"},
    )

    node = only(pipeline.run(analysis), "usePanel")

    assert node.metadata["variables"] == {"visible": ROLE_FUNCTION}
    assert node.metadata["verdicts"]["visible"]["source"] == "oracle"


def test_analyze_document_reports_not_analyzable(
    pipeline: DFDPipeline, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="dfdgen"):
        result = asyncio.run(
            pipeline.analyze_document({"component": "Broken", "file": "Broken.svelte", "error": "syntax error"})
        )

    assert isinstance(result, NotAnalyzable)
    assert result.component == "Broken"
    assert result.to_dict()["analyzable"] is False
    assert any("not analyzable" in record.getMessage() for record in caplog.records)


def test_analyze_document_builds_graph(pipeline: DFDPipeline) -> None:
    result = asyncio.run(
        pipeline.analyze_document(
            {
                "component": "Greeting",
                "props": ["name"],
                "output": [{"element": "h1", "display": ["name"]}],
            }
        )
    )

    payload = result.to_dict()
    assert payload["component"] == "Greeting"
    assert [edge["label"] for edge in payload["edges"]] == ["display"]


def test_merge_atoms_prefers_declared_definitions() -> None:
    scanned = [AtomDefinition(name="countAtom"), AtomDefinition(name="userAtom")]
    declared = [AtomDefinition(name="countAtom", derived=True, dependencies=("baseAtom",))]

    merged = {atom.name: atom for atom in merge_atoms(declared, scanned)}

    assert merged["countAtom"].derived is True
    assert set(merged) == {"countAtom", "userAtom"}
