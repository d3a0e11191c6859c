"""Tests for dfdgen.assembler.subgraphs."""

from __future__ import annotations

import logging

import pytest

from dfdgen.assembler.subgraphs import (
    KIND_CONDITIONAL,
    KIND_LOOP,
    KIND_OUTPUT,
    ROOT_LABEL,
    condition_label,
    has_bound_content,
)
from dfdgen.loader import parse_document
from dfdgen.models import Conditional, DFDGraph, Iteration
from dfdgen.pipeline import DFDPipeline
from tests._fixtures.components import component, edge_labels, element, hook, literal, only


def _with_state(*names: str, **fields):
    hooks = [
        hook("useState", name, f"set{name[:1].upper()}{name[1:]}", arguments=[literal("[]")], line=index + 1)
        for index, name in enumerate(names)
    ]
    return component(hooks=hooks, **fields)


def _subgraphs_of_kind(graph: DFDGraph, kind: str):
    return [subgraph for subgraph in graph.subgraphs if subgraph.kind == kind]


def test_root_output_subgraph_always_present(pipeline: DFDPipeline) -> None:
    graph = pipeline.run(component())

    (root,) = graph.subgraphs
    assert root.label == ROOT_LABEL
    assert root.kind == KIND_OUTPUT
    assert root.parent is None


def test_conditional_branches_get_labelled_subgraphs(pipeline: DFDPipeline) -> None:
    analysis = _with_state(
        "open",
        "count",
        output=[
            Conditional(
                expression="open",
                variables=["open"],
                when_true=[element("p", display=["count"])],
                when_false=[element("span", display=["count"])],
            )
        ],
    )

    graph = pipeline.run(analysis)

    branches = _subgraphs_of_kind(graph, KIND_CONDITIONAL)
    assert [subgraph.label for subgraph in branches] == ["{open}", "{!open}"]
    open_node = only(graph, "open")
    for branch in branches:
        assert edge_labels(graph, open_node, graph.node(branch.id)) == ["controls visibility"]
    assert only(graph, "<p>").id in branches[0].members
    assert only(graph, "<span>").id in branches[1].members


def test_unbound_conditional_content_is_still_shown(pipeline: DFDPipeline) -> None:
    analysis = _with_state(
        "loading",
        output=[Conditional(expression="loading", variables=["loading"], when_true=[element("p")])],
    )

    graph = pipeline.run(analysis)

    (branch,) = _subgraphs_of_kind(graph, KIND_CONDITIONAL)
    assert branch.members == [only(graph, "<p>").id]


def test_nested_iterations_merge_into_one_loop(pipeline: DFDPipeline) -> None:
    inner = Iteration(
        collection="row.cells",
        variables=["row"],
        item="cell",
        body=[element("td", display=["cell"])],
    )
    analysis = _with_state(
        "rows",
        output=[Iteration(collection="rows", variables=["rows"], item="row", body=[element("tr", inner)])],
    )

    graph = pipeline.run(analysis)

    (loop,) = _subgraphs_of_kind(graph, KIND_LOOP)
    rows = only(graph, "rows")
    assert edge_labels(graph, rows, graph.node(loop.id)) == ["iterates over"]
    assert edge_labels(graph, rows, only(graph, "<td>")) == ["display"]
    assert loop.metadata["merged"] == ["row.cells"]


def test_nested_iteration_without_variables_resolves_through_outer_item(pipeline: DFDPipeline) -> None:
    inner = Iteration(collection="row.cells", item="cell", body=[element("td", display=["cell"])])
    analysis = _with_state(
        "rows",
        output=[Iteration(collection="rows", item="row", body=[element("tr", inner)])],
    )

    graph = pipeline.run(analysis)

    (loop,) = _subgraphs_of_kind(graph, KIND_LOOP)
    rows = only(graph, "rows")
    assert edge_labels(graph, rows, graph.node(loop.id)) == ["iterates over"]
    assert edge_labels(graph, rows, only(graph, "<td>")) == ["display"]


def test_loaded_table_document_links_cells_to_state(pipeline: DFDPipeline) -> None:
    analysis = parse_document(
        """
component: Table
hooks:
  - name: useState
    variables: [rows, setRows]
    arguments: ["[]"]
output:
  - loop: rows
    item: row
    body:
      - element: tr
        children:
          - loop: row.cells
            item: cell
            body:
              - element: td
                display: [cell]
"""
    )

    graph = pipeline.run(analysis)

    assert edge_labels(graph, only(graph, "rows"), only(graph, "<td>")) == ["display"]


def test_dotted_condition_inside_loop_controls_from_collection(pipeline: DFDPipeline) -> None:
    guard = Conditional(expression="row.visible", variables=["row.visible"], when_true=[element("p")])
    analysis = _with_state("rows", output=[Iteration(collection="rows", item="row", body=[guard])])

    graph = pipeline.run(analysis)

    (branch,) = _subgraphs_of_kind(graph, KIND_CONDITIONAL)
    assert edge_labels(graph, only(graph, "rows"), graph.node(branch.id)) == ["controls visibility"]


def test_conditional_between_loops_keeps_them_apart(pipeline: DFDPipeline) -> None:
    inner = Iteration(collection="row.cells", variables=["row"], item="cell", body=[element("td", display=["cell"])])
    guard = Conditional(expression="row.visible", variables=["row"], when_true=[inner])
    analysis = _with_state("rows", output=[Iteration(collection="rows", variables=["rows"], item="row", body=[guard])])

    graph = pipeline.run(analysis)

    loops = _subgraphs_of_kind(graph, KIND_LOOP)
    (branch,) = _subgraphs_of_kind(graph, KIND_CONDITIONAL)
    assert len(loops) == 2
    assert branch.parent == loops[0].id
    assert loops[1].parent == branch.id


def test_empty_subgraphs_are_pruned(pipeline: DFDPipeline, caplog: pytest.LogCaptureFixture) -> None:
    analysis = _with_state(
        "items",
        output=[Iteration(collection="items", variables=["items"], item="item", body=[element("li")])],
    )

    with caplog.at_level(logging.DEBUG, logger="dfdgen"):
        graph = pipeline.run(analysis)

    assert _subgraphs_of_kind(graph, KIND_LOOP) == []
    assert graph.edges == []
    assert any("Pruning empty subgraph" in record.getMessage() for record in caplog.records)
    (root,) = graph.subgraphs
    assert root.members == []


def test_condition_label_negation() -> None:
    assert condition_label("open") == "{open}"
    assert condition_label("open", negate=True) == "{!open}"
    assert condition_label("!ready", negate=True) == "{ready}"
    assert condition_label("a != b", negate=True) == "{!a != b}"


def test_has_bound_content() -> None:
    assert not has_bound_content([element("div", element("span"))])
    assert has_bound_content([element("div", element("span", display=["name"]))])
    assert has_bound_content([Iteration(collection="items")])
