"""Hook classification: category lookup and per-variable role resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..logging import get_logger
from ..models import BINDING_ARRAY, BINDING_IDENTIFIER, ROLE_DATA, ROLE_FUNCTION, HookInvocation
from .builtins import CATEGORY_CUSTOM, BuiltinHook, lookup_builtin
from .heuristics import NamingHeuristic
from .oracle import DEFAULT_ORACLE_TIMEOUT, TypeOracle, query_oracle
from .type_shapes import extract_member_names

logger = get_logger("classification")

SOURCE_ORACLE = "oracle"
SOURCE_HEURISTIC = "heuristic"


@dataclass(frozen=True)
class Verdict:
    role: str
    source: str
    type_string: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"role": self.role, "source": self.source}
        if self.type_string is not None:
            payload["type"] = self.type_string
        return payload


class RoleTier(ABC):
    """One link of the classification chain."""

    source: str

    @abstractmethod
    async def verdict(
        self, invocation: HookInvocation, variable: str, file_path: Optional[str]
    ) -> Optional[Verdict]:
        """Return a verdict for ``variable`` or None when this tier cannot decide."""


class OracleTier(RoleTier):
    source = SOURCE_ORACLE

    def __init__(self, oracle: TypeOracle, timeout: float = DEFAULT_ORACLE_TIMEOUT) -> None:
        self._oracle = oracle
        self._timeout = timeout

    async def verdict(
        self, invocation: HookInvocation, variable: str, file_path: Optional[str]
    ) -> Optional[Verdict]:
        resolution = await query_oracle(
            self._oracle, file_path, invocation.position, variable, timeout=self._timeout
        )
        if resolution is None:
            return None
        role = ROLE_FUNCTION if resolution.is_function else ROLE_DATA
        return Verdict(role=role, source=self.source, type_string=resolution.type_string)


class HeuristicTier(RoleTier):
    source = SOURCE_HEURISTIC

    def __init__(self, heuristic: NamingHeuristic) -> None:
        self._heuristic = heuristic

    async def verdict(
        self, invocation: HookInvocation, variable: str, file_path: Optional[str]
    ) -> Optional[Verdict]:
        return Verdict(role=self._heuristic.role_for(variable), source=self.source)


def resolve_verdicts(verdicts: Sequence[Verdict]) -> Verdict:
    """Pick the winning verdict from an ordered chain.

    The first verdict wins, except when the naming heuristic calls the name a
    function and the winner reports a non-function, e.g. an oracle typing
    ``toggleOpen`` as ``boolean``. The heuristic verdict is returned then.
    """
    if not verdicts:
        raise ValueError("At least one verdict is required")
    primary = verdicts[0]
    for candidate in verdicts[1:]:
        if (
            candidate.source == SOURCE_HEURISTIC
            and candidate.role == ROLE_FUNCTION
            and primary.role != ROLE_FUNCTION
        ):
            return candidate
    return primary


class HookClassifier:
    """Assigns a category and per-variable roles to hook invocations.

    Tiers run in order (type oracle first when one is configured, naming
    heuristic last) and are combined with :func:`resolve_verdicts`.
    """

    def __init__(
        self,
        oracle: Optional[TypeOracle] = None,
        *,
        heuristic: Optional[NamingHeuristic] = None,
        oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT,
    ) -> None:
        self._oracle = oracle
        self._oracle_timeout = oracle_timeout
        self._tiers: List[RoleTier] = []
        if oracle is not None:
            self._tiers.append(OracleTier(oracle, oracle_timeout))
        self._tiers.append(HeuristicTier(heuristic or NamingHeuristic()))

    @property
    def tiers(self) -> List[RoleTier]:
        return list(self._tiers)

    async def classify(self, invocation: HookInvocation, *, file_path: Optional[str] = None) -> None:
        builtin = lookup_builtin(invocation.name)
        category = builtin.category if builtin is not None else CATEGORY_CUSTOM
        metadata: Dict[str, Any] = {"builtin": bool(builtin and builtin.builtin)}
        verdicts: Dict[str, Verdict] = {}

        if builtin is not None and builtin.delegated:
            roles: Dict[str, str] = {}
        else:
            roles = await self._assign_roles(invocation, builtin, file_path, verdicts)

        if builtin is not None and builtin.reducer:
            metadata.update(await self._reducer_metadata(invocation, file_path))
        if verdicts:
            metadata["verdicts"] = {name: verdict.to_dict() for name, verdict in verdicts.items()}

        invocation.classify(category, roles, metadata)
        logger.debug("Classified %s as %s with roles %s", invocation.name, category, roles)

    async def _assign_roles(
        self,
        invocation: HookInvocation,
        builtin: Optional[BuiltinHook],
        file_path: Optional[str],
        verdicts: Dict[str, Verdict],
    ) -> Dict[str, str]:
        roles: Dict[str, str] = {}
        variables = invocation.variables
        if builtin is not None and invocation.binding == BINDING_IDENTIFIER and len(variables) == 1:
            if builtin.read_only:
                roles[variables[0]] = ROLE_DATA
                return roles
            if builtin.positional_roles:
                roles[variables[0]] = builtin.positional_roles[0]
                return roles
        if builtin is not None and builtin.positional_roles and invocation.binding == BINDING_ARRAY:
            for index, variable in enumerate(variables):
                if index < len(builtin.positional_roles):
                    roles[variable] = builtin.positional_roles[index]
            variables = [variable for variable in variables if variable not in roles]

        for variable in variables:
            verdict = await self._resolve(invocation, variable, file_path)
            roles[variable] = verdict.role
            verdicts[variable] = verdict
        return roles

    async def _resolve(
        self, invocation: HookInvocation, variable: str, file_path: Optional[str]
    ) -> Verdict:
        collected: List[Verdict] = []
        for tier in self._tiers:
            verdict = await tier.verdict(invocation, variable, file_path)
            if verdict is not None:
                collected.append(verdict)
        return resolve_verdicts(collected)

    async def _reducer_metadata(
        self, invocation: HookInvocation, file_path: Optional[str]
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        reducer_name = invocation.first_identifier()
        if reducer_name:
            metadata["reducer_name"] = reducer_name
        if not invocation.variables or self._oracle is None:
            return metadata
        state_variable = invocation.variables[0]
        resolution = await query_oracle(
            self._oracle,
            file_path,
            invocation.position,
            state_variable,
            timeout=self._oracle_timeout,
        )
        if resolution is not None:
            members = extract_member_names(resolution.type_string)
            if members:
                metadata["state_properties"] = members
                metadata["state_type"] = resolution.type_string
        return metadata


__all__ = [
    "HeuristicTier",
    "HookClassifier",
    "OracleTier",
    "RoleTier",
    "SOURCE_HEURISTIC",
    "SOURCE_ORACLE",
    "Verdict",
    "resolve_verdicts",
]
