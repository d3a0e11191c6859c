"""Tests for dfdgen.classification.heuristics."""

from __future__ import annotations

import pytest

from dfdgen.classification.heuristics import NamingHeuristic, is_event_attribute, looks_like_action
from dfdgen.models import ROLE_DATA, ROLE_FUNCTION


@pytest.mark.parametrize("name", ["onSave", "handleClick", "setCount", "fetchUser", "isOpen", "increment", "reset"])
def test_naming_heuristic_flags_function_names(name: str) -> None:
    assert NamingHeuristic().role_for(name) == ROLE_FUNCTION


@pytest.mark.parametrize("name", ["count", "user", "settings", "island", "online", "data"])
def test_naming_heuristic_leaves_data_names(name: str) -> None:
    # "island" and "online" start with a prefix but not at a word boundary
    assert NamingHeuristic().role_for(name) == ROLE_DATA


def test_naming_heuristic_accepts_extra_patterns() -> None:
    heuristic = NamingHeuristic(extra_prefixes=["apply"], extra_names=["refresh"])

    assert heuristic.is_function_name("applyFilter")
    assert heuristic.is_function_name("refresh")
    assert not NamingHeuristic().is_function_name("applyFilter")


@pytest.mark.parametrize("name", ["onClick", "onclick", "on:click", "@click", "@click.prevent", "v-on:submit"])
def test_is_event_attribute_covers_framework_syntaxes(name: str) -> None:
    assert is_event_attribute(name)


@pytest.mark.parametrize("name", ["value", "class", "bind:value", "v-model", ":title"])
def test_is_event_attribute_rejects_plain_attributes(name: str) -> None:
    assert not is_event_attribute(name)


def test_looks_like_action_matches_mutating_members() -> None:
    assert looks_like_action("addTodo")
    assert looks_like_action("increment")
    assert not looks_like_action("todos")
