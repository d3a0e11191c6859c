"""Library processor behaviour through the full analysis pipeline."""

from __future__ import annotations

import asyncio
import logging

import pytest

from dfdgen.models import (
    BINDING_OBJECT,
    DATA_STORE,
    EXTERNAL_INPUT,
    ROLE_DATA,
    ROLE_FUNCTION,
    AtomDefinition,
    Prop,
)
from dfdgen.pipeline import AnalysisRun, DFDPipeline
from tests._fixtures.components import component, edge_labels, hook, ident, literal, only


def _execute(pipeline: DFDPipeline, analysis) -> AnalysisRun:
    return asyncio.run(pipeline.execute(analysis))


def test_jotai_accessors_share_one_atom_node(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[
            hook("useAtomValue", "count", arguments=[ident("countAtom")], library="jotai"),
            hook("useSetAtom", "setCount", arguments=[ident("countAtom")], library="jotai", line=2),
        ]
    )

    graph = _execute(pipeline, analysis).graph

    atom = only(graph, "countAtom")
    assert atom.type == DATA_STORE
    assert atom.metadata["read_variables"] == ["count"]
    assert atom.metadata["write_variables"] == ["setCount"]
    assert atom.metadata["variables"] == {"count": ROLE_DATA, "setCount": ROLE_FUNCTION}
    assert atom.metadata["is_read_write_pair"] is True


def test_derived_atom_links_to_its_dependencies(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[
            hook("useAtom", "count", "setCount", arguments=[ident("countAtom")], library="jotai"),
            hook("useAtomValue", "doubled", arguments=[ident("doubledAtom")], library="jotai", line=2),
        ],
        atoms=[
            AtomDefinition(name="countAtom"),
            AtomDefinition(name="doubledAtom", derived=True, dependencies=("countAtom",)),
        ],
    )

    graph = _execute(pipeline, analysis).graph

    count, doubled = only(graph, "countAtom"), only(graph, "doubledAtom")
    assert doubled.metadata["is_derived"] is True
    assert edge_labels(graph, count, doubled) == ["derives"]


def test_navigation_hooks_share_url_input(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[
            hook("usePathname", "pathname", library="next/navigation"),
            hook("useSearchParams", "searchParams", library="next/navigation", line=2),
        ]
    )

    graph = _execute(pipeline, analysis).graph

    url = only(graph, "URL: Input")
    assert url.type == EXTERNAL_INPUT
    for name in ("usePathname", "useSearchParams"):
        assert edge_labels(graph, url, only(graph, name)) == ["provides"]


def test_router_navigation_writes_url_output(pipeline: DFDPipeline) -> None:
    analysis = component(hooks=[hook("useRouter", "router", library="next/navigation")])

    graph = _execute(pipeline, analysis).graph

    assert edge_labels(graph, only(graph, "useRouter"), only(graph, "URL: Output")) == ["navigates"]
    assert graph.nodes_labelled("URL: Input") == []


def test_swr_query_and_mutation_share_server_node(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[
            hook(
                "useSWR",
                "user",
                "error",
                binding=BINDING_OBJECT,
                aliases={"user": "data"},
                arguments=[literal("/api/user")],
                library="swr",
            ),
            hook(
                "useSWRMutation",
                "trigger",
                binding=BINDING_OBJECT,
                arguments=[literal("/api/user")],
                library="swr/mutation",
                line=2,
            ),
        ]
    )

    graph = _execute(pipeline, analysis).graph

    server = only(graph, "Server: /api/user")
    query, mutation = only(graph, "useSWR"), only(graph, "useSWRMutation")
    assert edge_labels(graph, server, query) == ["fetch"]
    assert edge_labels(graph, mutation, server) == ["mutate"]
    assert query.metadata["aliases"] == {"user": "data"}
    assert query.metadata["variables"] == {"user": ROLE_DATA, "error": ROLE_DATA}
    assert mutation.metadata["variables"] == {"trigger": ROLE_FUNCTION}


def test_query_without_static_endpoint_skips_server(
    pipeline: DFDPipeline, caplog: pytest.LogCaptureFixture
) -> None:
    analysis = component(
        hooks=[hook("useSWR", "data", binding=BINDING_OBJECT, arguments=[ident("key")], library="swr")]
    )

    with caplog.at_level(logging.WARNING, logger="dfdgen"):
        graph = _execute(pipeline, analysis).graph

    assert only(graph, "useSWR").type == DATA_STORE
    assert not [node for node in graph if node.label.startswith("Server")]
    assert any("No static endpoint" in record.getMessage() for record in caplog.records)


def test_pinia_store_to_refs_extends_store_node(pipeline: DFDPipeline) -> None:
    analysis = component(
        framework="vue",
        hooks=[
            hook("useCounterStore", "store", library="@/stores/counter"),
            hook(
                "storeToRefs",
                "count",
                "doubled",
                binding=BINDING_OBJECT,
                arguments=[ident("store")],
                library="pinia",
                line=2,
            ),
        ],
    )

    run = _execute(pipeline, analysis)

    store = only(run.graph, "useCounterStore")
    assert store.metadata["processor"] == "pinia"
    assert store.metadata["refs"] == ["count", "doubled"]
    assert set(store.metadata["variables"]) == {"store", "count", "doubled"}
    assert [outcome.processor_id for outcome in run.outcomes] == ["pinia", "pinia"]


def test_store_hook_without_framework_or_source_goes_to_zustand(pipeline: DFDPipeline) -> None:
    run = _execute(pipeline, component(hooks=[hook("useCartStore", "cart")]))

    assert run.outcomes[0].processor_id == "zustand"


def test_store_hook_imported_from_pinia_goes_to_pinia(pipeline: DFDPipeline) -> None:
    run = _execute(pipeline, component(hooks=[hook("useCartStore", "cart", library="pinia")]))

    assert run.outcomes[0].processor_id == "pinia"


def test_custom_hook_node_records_verdicts(pipeline: DFDPipeline) -> None:
    analysis = component(
        hooks=[hook("useCounter", "count", "increment", "decrement", "reset", binding=BINDING_OBJECT)]
    )

    node = only(_execute(pipeline, analysis).graph, "useCounter")

    assert node.metadata["data_values"] == ["count"]
    assert node.metadata["function_values"] == ["increment", "decrement", "reset"]
    assert node.metadata["verdicts"]["increment"]["source"] == "heuristic"


def test_use_state_initialised_from_prop(pipeline: DFDPipeline) -> None:
    analysis = component(
        props=[Prop(name="initialCount")],
        hooks=[hook("useState", "count", "setCount", arguments=[ident("initialCount")])],
    )

    graph = _execute(pipeline, analysis).graph

    assert edge_labels(graph, only(graph, "initialCount"), only(graph, "count")) == ["initializes"]
