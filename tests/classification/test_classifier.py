"""Tests for dfdgen.classification.classifier."""

from __future__ import annotations

import asyncio
from typing import Optional

import pytest

from dfdgen.classification.builtins import CATEGORY_CUSTOM, CATEGORY_REDUCER, CATEGORY_STATE
from dfdgen.classification.classifier import (
    SOURCE_HEURISTIC,
    SOURCE_ORACLE,
    HookClassifier,
    Verdict,
    resolve_verdicts,
)
from dfdgen.classification.oracle import StaticTypeOracle, TypeResolution
from dfdgen.models import BINDING_OBJECT, ROLE_DATA, ROLE_FUNCTION, SourcePosition
from tests._fixtures.components import hook, ident, literal


class SlowOracle:
    """Oracle that never answers within a short timeout."""

    async def resolve_type(
        self, file_path: Optional[str], position: Optional[SourcePosition], property_name: str
    ) -> TypeResolution:
        await asyncio.sleep(5)
        return TypeResolution(type_string="() => void", is_function=True)


def test_custom_hook_roles_fall_back_to_naming_heuristic() -> None:
    invocation = hook("useCounter", "count", "increment", "decrement", "reset", binding=BINDING_OBJECT)

    asyncio.run(HookClassifier().classify(invocation))

    assert invocation.category == CATEGORY_CUSTOM
    assert invocation.roles == {
        "count": ROLE_DATA,
        "increment": ROLE_FUNCTION,
        "decrement": ROLE_FUNCTION,
        "reset": ROLE_FUNCTION,
    }
    assert invocation.metadata["builtin"] is False
    assert invocation.metadata["verdicts"]["count"]["source"] == SOURCE_HEURISTIC


def test_use_state_pair_uses_positional_roles() -> None:
    invocation = hook("useState", "count", "setCount", arguments=[literal("0")])

    asyncio.run(HookClassifier().classify(invocation))

    assert invocation.category == CATEGORY_STATE
    assert invocation.roles == {"count": ROLE_DATA, "setCount": ROLE_FUNCTION}
    assert invocation.metadata["builtin"] is True
    assert "verdicts" not in invocation.metadata


def test_read_only_builtin_binds_data() -> None:
    invocation = hook("useContext", "setTheme", arguments=[ident("ThemeContext")])

    asyncio.run(HookClassifier().classify(invocation))

    assert invocation.roles == {"setTheme": ROLE_DATA}


def test_oracle_verdict_wins_for_data_names() -> None:
    oracle = StaticTypeOracle({"format": "(value: number) => string", "user": "User"})
    invocation = hook("useFormatter", "user", "format", binding=BINDING_OBJECT)

    asyncio.run(HookClassifier(oracle).classify(invocation))

    assert invocation.roles == {"user": ROLE_DATA, "format": ROLE_FUNCTION}
    assert invocation.metadata["verdicts"]["format"] == {
        "role": ROLE_FUNCTION,
        "source": SOURCE_ORACLE,
        "type": "(value: number) => string",
    }


def test_heuristic_function_overrides_oracle_data_verdict() -> None:
    oracle = StaticTypeOracle({"toggleOpen": "boolean"})
    invocation = hook("useDisclosure", "toggleOpen", binding=BINDING_OBJECT)

    asyncio.run(HookClassifier(oracle).classify(invocation))

    assert invocation.roles == {"toggleOpen": ROLE_FUNCTION}
    assert invocation.metadata["verdicts"]["toggleOpen"]["source"] == SOURCE_HEURISTIC


def test_oracle_timeout_falls_back_to_heuristic() -> None:
    classifier = HookClassifier(SlowOracle(), oracle_timeout=0.01)
    invocation = hook("useCounter", "count", "increment", binding=BINDING_OBJECT)

    asyncio.run(classifier.classify(invocation))

    assert invocation.roles == {"count": ROLE_DATA, "increment": ROLE_FUNCTION}


def test_unknown_oracle_variable_uses_heuristic() -> None:
    oracle = StaticTypeOracle({})
    invocation = hook("useSession", "session", "logout", binding=BINDING_OBJECT)

    asyncio.run(HookClassifier(oracle).classify(invocation))

    assert invocation.roles == {"session": ROLE_DATA, "logout": ROLE_FUNCTION}


def test_reducer_state_properties_come_from_oracle() -> None:
    oracle = StaticTypeOracle({"state": "{ count: number; step: number }"})
    invocation = hook("useReducer", "state", "dispatch", arguments=[ident("reducer"), ident("initial")])

    asyncio.run(HookClassifier(oracle).classify(invocation))

    assert invocation.category == CATEGORY_REDUCER
    assert invocation.roles == {"state": ROLE_DATA, "dispatch": ROLE_FUNCTION}
    assert invocation.metadata["reducer_name"] == "reducer"
    assert invocation.metadata["state_properties"] == ["count", "step"]


def test_delegated_hooks_leave_roles_to_processors() -> None:
    invocation = hook("useSWR", "data", "error", binding=BINDING_OBJECT, arguments=[literal("/api/user")])

    asyncio.run(HookClassifier().classify(invocation))

    assert invocation.roles == {}
    assert invocation.metadata["builtin"] is False


def test_classifying_twice_raises() -> None:
    invocation = hook("useState", "count", "setCount")
    classifier = HookClassifier()
    asyncio.run(classifier.classify(invocation))

    with pytest.raises(RuntimeError):
        asyncio.run(classifier.classify(invocation))


def test_resolve_verdicts_requires_input() -> None:
    with pytest.raises(ValueError):
        resolve_verdicts([])


def test_resolve_verdicts_keeps_first_when_no_override() -> None:
    first = Verdict(role=ROLE_FUNCTION, source=SOURCE_ORACLE)
    second = Verdict(role=ROLE_DATA, source=SOURCE_HEURISTIC)

    assert resolve_verdicts([first, second]) is first
