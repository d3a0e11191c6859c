"""Tests for dfdgen.processors.registry."""

from __future__ import annotations

import logging
from typing import Sequence

import pytest

from dfdgen.models import DATA_STORE, DFDNode
from dfdgen.processors.base import Processor, ProcessorMetadata, ProcessorResult, build_node
from dfdgen.processors.registry import ProcessorRegistry
from dfdgen.processors.session import AnalysisSession
from tests._fixtures.components import component, hook


class StubProcessor(Processor):
    def __init__(self, processor_id: str, priority: int, hooks: Sequence[str] = ("useThing",)) -> None:
        self.metadata = ProcessorMetadata(id=processor_id, library="stub", hook_names=tuple(hooks), priority=priority)

    def process(self, invocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        result.add_node(build_node(session, self.id, invocation.name, DATA_STORE, invocation))
        return result


class FailingProcessor(StubProcessor):
    def process(self, invocation, session: AnalysisSession) -> ProcessorResult:
        raise RuntimeError("boom")


class DanglingEdgeProcessor(StubProcessor):
    def process(self, invocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        node = result.add_node(DFDNode(id=session.next_id("dangling"), label="x", type=DATA_STORE))
        result.add_edge(node.id, "missing_0", "reads")
        return result


def _session() -> AnalysisSession:
    return AnalysisSession(component())


def test_higher_priority_processor_wins() -> None:
    low = StubProcessor("low", 10)
    high = StubProcessor("high", 90)
    registry = ProcessorRegistry([low, high])

    assert registry.select(hook("useThing")) is high
    assert [processor.id for processor in registry.processors] == ["high", "low"]


def test_equal_priority_resolves_by_registration_order() -> None:
    first = StubProcessor("first", 50)
    second = StubProcessor("second", 50)

    assert ProcessorRegistry([first, second]).select(hook("useThing")) is first
    assert ProcessorRegistry([second, first]).select(hook("useThing")) is second


def test_unmatched_invocation_raises_lookup_error() -> None:
    registry = ProcessorRegistry([StubProcessor("only", 50)])

    with pytest.raises(LookupError):
        registry.select(hook("useOther"))


def test_duplicate_registration_is_rejected() -> None:
    registry = ProcessorRegistry([StubProcessor("dup", 50)])

    with pytest.raises(ValueError):
        registry.register(StubProcessor("dup", 10))


def test_dispatch_commits_processor_output() -> None:
    session = _session()
    registry = ProcessorRegistry([StubProcessor("stub", 50)])

    outcome = registry.dispatch(hook("useThing", "value"), session)

    assert outcome.handled
    assert outcome.processor_id == "stub"
    assert outcome.node_ids == ("stub_0",)
    assert session.graph.node("stub_0").label == "useThing"


def test_failing_processor_is_logged_and_dispatch_continues(caplog: pytest.LogCaptureFixture) -> None:
    session = _session()
    registry = ProcessorRegistry([FailingProcessor("broken", 60, hooks=["useBroken"]), StubProcessor("stub", 50)])

    with caplog.at_level(logging.WARNING, logger="dfdgen"):
        failed = registry.dispatch(hook("useBroken"), session)
        succeeded = registry.dispatch(hook("useThing"), session)

    assert not failed.handled
    assert failed.error == "boom"
    assert succeeded.handled
    assert [(fault.processor_id, fault.hook) for fault in session.faults] == [("broken", "useBroken")]
    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
    assert any("broken" in message and "useBroken" in message for message in messages)


def test_invalid_result_is_discarded_atomically() -> None:
    session = _session()
    registry = ProcessorRegistry([DanglingEdgeProcessor("dangling", 50)])

    outcome = registry.dispatch(hook("useThing"), session)

    assert not outcome.handled
    assert session.graph.nodes == []
    assert session.graph.edges == []
    assert len(session.faults) == 1
