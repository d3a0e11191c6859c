"""Graph assembly: render-tree walk, subgraphs and edge inference."""

from __future__ import annotations

from .builder import GraphAssembler, is_function_prop, is_two_way_attribute
from .edges import merge_edges
from .index import Binding, VariableIndex, resolve_scope, split_reference
from .subgraphs import OutputLayout, OutputWalker, condition_label

__all__ = [
    "Binding",
    "GraphAssembler",
    "OutputLayout",
    "OutputWalker",
    "VariableIndex",
    "condition_label",
    "is_function_prop",
    "is_two_way_attribute",
    "merge_edges",
    "resolve_scope",
    "split_reference",
]
