"""Hook classification: builtin table, naming heuristic and type oracle tiers."""

from __future__ import annotations

from .builtins import BUILTIN_HOOKS, BuiltinHook, lookup_builtin
from .classifier import HookClassifier, Verdict, resolve_verdicts
from .heuristics import NamingHeuristic, is_event_attribute, looks_like_action
from .oracle import StaticTypeOracle, TypeOracle, TypeOracleError, TypeResolution
from .type_shapes import extract_member_names, is_function_type

__all__ = [
    "BUILTIN_HOOKS",
    "BuiltinHook",
    "HookClassifier",
    "NamingHeuristic",
    "StaticTypeOracle",
    "TypeOracle",
    "TypeOracleError",
    "TypeResolution",
    "Verdict",
    "extract_member_names",
    "is_event_attribute",
    "is_function_type",
    "looks_like_action",
    "lookup_builtin",
    "resolve_verdicts",
]
