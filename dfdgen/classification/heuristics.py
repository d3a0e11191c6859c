"""Naming heuristics used to guess whether a bound variable is callable."""

from __future__ import annotations

import re
from typing import Iterable, Pattern

from ..models import ROLE_DATA, ROLE_FUNCTION

FUNCTION_PREFIXES = (
    "on",
    "handle",
    "set",
    "get",
    "update",
    "delete",
    "create",
    "fetch",
    "load",
    "toggle",
    "is",
    "has",
    "can",
    "should",
)

FUNCTION_NAMES = frozenset(
    {
        "increment",
        "decrement",
        "dispatch",
        "navigate",
        "logout",
        "login",
        "submit",
        "reset",
        "clear",
    }
)

# Store members that mutate state when called.
ACTION_PREFIXES = (
    "set",
    "update",
    "add",
    "remove",
    "delete",
    "create",
    "fetch",
    "load",
    "save",
    "clear",
    "reset",
    "toggle",
    "increment",
    "decrement",
    "increase",
    "decrease",
    "push",
    "pop",
    "shift",
    "unshift",
    "handle",
    "on",
    "dispatch",
)

_EVENT_ATTRIBUTE = re.compile(r"^(?:on[A-Z]\w*|on:\w+|@[\w.-]+|v-on:[\w.-]+|on[a-z]+)$")


def _compile_prefixes(prefixes: Iterable[str]) -> Pattern[str]:
    alternatives = "|".join(re.escape(prefix) for prefix in sorted(set(prefixes), key=len, reverse=True))
    return re.compile(rf"^(?:{alternatives})[A-Z0-9_]")


class NamingHeuristic:
    """Fixed pattern set deciding ``function`` vs ``data`` from a name alone."""

    def __init__(
        self,
        extra_prefixes: Iterable[str] = (),
        extra_names: Iterable[str] = (),
    ) -> None:
        self._prefix_pattern = _compile_prefixes((*FUNCTION_PREFIXES, *extra_prefixes))
        self._names = FUNCTION_NAMES | frozenset(extra_names)

    def is_function_name(self, name: str) -> bool:
        return name in self._names or bool(self._prefix_pattern.match(name))

    def role_for(self, name: str) -> str:
        return ROLE_FUNCTION if self.is_function_name(name) else ROLE_DATA


def looks_like_action(name: str) -> bool:
    """Return True when a store member name reads like a state mutation."""
    lowered = name.lower()
    return any(lowered.startswith(prefix) for prefix in ACTION_PREFIXES)


def is_event_attribute(name: str) -> bool:
    """Recognise React (``onClick``), Svelte (``onclick``, ``on:click``) and Vue (``@click``) events."""
    return bool(_EVENT_ATTRIBUTE.match(name))


__all__ = [
    "ACTION_PREFIXES",
    "FUNCTION_NAMES",
    "FUNCTION_PREFIXES",
    "NamingHeuristic",
    "is_event_attribute",
    "looks_like_action",
]
