"""Processor for React's builtin hooks."""

from __future__ import annotations

from ..models import (
    BINDING_IDENTIFIER,
    DATA_STORE,
    EXTERNAL_INPUT,
    EXTERNAL_OUTPUT,
    ROLE_DATA,
    ROLE_FUNCTION,
    HookInvocation,
)
from .base import BUILTIN_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .common import derived_node, roles_for, state_node
from .session import AnalysisSession

_STATE_HOOKS = frozenset({"useState", "useTransition", "useOptimistic", "useActionState"})
_CONTEXT_HOOKS = frozenset({"useContext", "use"})
_DERIVED_HOOKS = frozenset({"useMemo", "useDeferredValue", "useSyncExternalStore"})
# Effects, refs and callbacks contribute processes, not nodes.
_SILENT_HOOKS = frozenset(
    {
        "useEffect",
        "useLayoutEffect",
        "useInsertionEffect",
        "useImperativeHandle",
        "useDebugValue",
        "useCallback",
        "useRef",
        "useId",
    }
)


class ReactProcessor(Processor):
    metadata = ProcessorMetadata(
        id="react",
        library="react",
        package_patterns=("react", "preact/hooks", "preact/compat"),
        hook_names=tuple(sorted(_STATE_HOOKS | _CONTEXT_HOOKS | _DERIVED_HOOKS | _SILENT_HOOKS | {"useReducer"})),
        priority=BUILTIN_PRIORITY,
        description="React builtin hooks",
        frameworks=("react",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        name = invocation.name
        if name in _SILENT_HOOKS:
            return result
        if name in _STATE_HOOKS:
            node = state_node(session, invocation, category="state", processor=self.id)
        elif name == "useReducer":
            node = self._reducer_node(invocation, session)
        elif name in _CONTEXT_HOOKS:
            self._context_nodes(invocation, session, result)
            return result
        else:
            node = derived_node(
                session,
                invocation,
                category="memo",
                processor=self.id,
                dependencies=invocation.dependencies or invocation.identifier_arguments(),
            )
        if node is not None:
            result.add_node(node)
        return result

    def _reducer_node(self, invocation: HookInvocation, session: AnalysisSession):
        roles = roles_for(invocation)
        if not roles:
            return None
        state_variable = invocation.variables[0]
        dispatchers = [name for name, role in roles.items() if role == ROLE_FUNCTION]
        reducer_name = invocation.metadata.get("reducer_name")
        return build_node(
            session,
            "reducer",
            state_variable,
            DATA_STORE,
            invocation,
            category="reducer",
            processor=self.id,
            reducer_name=reducer_name,
            read_variable=state_variable,
            write_variable=dispatchers[0] if dispatchers else None,
            variables=roles,
            writers=dispatchers,
            dispatchers=dispatchers,
            state_properties=list(invocation.metadata.get("state_properties", [])),
        )

    def _context_nodes(
        self, invocation: HookInvocation, session: AnalysisSession, result: ProcessorResult
    ) -> None:
        context_name = invocation.first_identifier()
        roles = roles_for(invocation)
        if invocation.binding == BINDING_IDENTIFIER:
            roles = {variable: ROLE_DATA for variable in roles}
        for variable, role in roles.items():
            node_type = EXTERNAL_OUTPUT if role == ROLE_FUNCTION else EXTERNAL_INPUT
            result.add_node(
                build_node(
                    session,
                    "context",
                    variable,
                    node_type,
                    invocation,
                    category="context",
                    processor=self.id,
                    context=context_name,
                    property=invocation.property_of(variable),
                    variables={variable: role},
                )
            )


__all__ = ["ReactProcessor"]
