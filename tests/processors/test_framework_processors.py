"""React, Vue and Svelte builtin processors."""

from __future__ import annotations

from dfdgen.models import DATA_STORE, EXTERNAL_INPUT, EXTERNAL_OUTPUT, Prop
from dfdgen.pipeline import DFDPipeline
from tests._fixtures.components import arrow, component, edge_labels, element, hook, ident, literal, only


def test_vue_computed_derives_from_ref(pipeline: DFDPipeline) -> None:
    analysis = component(
        framework="vue",
        hooks=[
            hook("ref", "count", arguments=[literal("0")]),
            hook("computed", "doubled", dependencies=["count"], line=2),
        ],
    )

    graph = pipeline.run(analysis)

    count, doubled = only(graph, "count"), only(graph, "doubled")
    assert count.metadata["writers"] == ["count"]
    assert doubled.metadata["derived"] is True
    assert edge_labels(graph, count, doubled) == ["derives"]


def test_vue_provide_and_inject(pipeline: DFDPipeline) -> None:
    analysis = component(
        framework="vue",
        hooks=[
            hook("ref", "theme", arguments=[literal("'dark'")]),
            hook("provide", arguments=[literal("theme"), ident("theme")], line=2),
            hook("inject", "locale", arguments=[literal("locale")], line=3),
        ],
    )

    graph = pipeline.run(analysis)

    provided = only(graph, "provide: theme")
    assert provided.type == EXTERNAL_OUTPUT
    assert edge_labels(graph, only(graph, "theme"), provided) == ["provides"]
    locale = only(graph, "locale")
    assert locale.type == EXTERNAL_INPUT
    assert locale.metadata["injection_key"] == "locale"


def test_svelte_state_rune_updated_by_inline_assignment(pipeline: DFDPipeline) -> None:
    analysis = component(
        framework="svelte",
        hooks=[
            hook("$state", "count", arguments=[literal("0")]),
            hook("$derived", "doubled", dependencies=["count"], line=2),
        ],
        output=[
            element("p", display=["doubled"]),
            element("button", attributes=[arrow("onclick", assigns=["count"])]),
        ],
    )

    graph = pipeline.run(analysis)

    count, doubled = only(graph, "count"), only(graph, "doubled")
    handler = only(graph, "onclick handler")
    assert count.type == DATA_STORE
    assert edge_labels(graph, count, doubled) == ["derives"]
    assert edge_labels(graph, doubled, only(graph, "<p>")) == ["display"]
    assert edge_labels(graph, only(graph, "<button>"), handler) == ["onclick"]
    assert edge_labels(graph, handler, count) == ["updates"]


def test_react_reducer_dispatch_from_handler(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[hook("useReducer", "state", "dispatch", arguments=[ident("reducer"), ident("initialState")])],
        output=[element("button", attributes=[arrow("onClick", "dispatch")])],
    )

    graph = pipeline.run(analysis)

    reducer = only(graph, "state")
    assert reducer.metadata["reducer_name"] == "reducer"
    assert reducer.metadata["dispatchers"] == ["dispatch"]
    assert edge_labels(graph, only(graph, "onClick handler"), reducer) == ["dispatch"]


def test_react_context_value_becomes_input(pipeline: DFDPipeline) -> None:
    analysis = component(hooks=[hook("useContext", "theme", arguments=[ident("ThemeContext")])])

    node = only(pipeline.run(analysis), "theme")

    assert node.type == EXTERNAL_INPUT
    assert node.metadata["context"] == "ThemeContext"


def test_react_memo_derives_from_dependencies(pipeline: DFDPipeline) -> None:
    analysis = component(
        props=[Prop(name="items")],
        hooks=[hook("useMemo", "total", dependencies=["items"])],
    )

    graph = pipeline.run(analysis)

    assert edge_labels(graph, only(graph, "items"), only(graph, "total")) == ["derives"]
