"""Catch-all processor for hooks no library processor recognises."""

from __future__ import annotations

from ..models import DATA_STORE, ROLE_FUNCTION, HookInvocation
from .base import FALLBACK_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .common import roles_for
from .session import AnalysisSession


class CustomHookProcessor(Processor):
    """Folds a custom hook into a single data-store carrying each variable's verdict."""

    metadata = ProcessorMetadata(
        id="custom-hook",
        library="",
        priority=FALLBACK_PRIORITY,
        description="Fallback for custom hooks and composables",
    )

    def matches(self, invocation: HookInvocation, framework: str | None = None) -> bool:
        return True

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        roles = roles_for(invocation)
        result.add_node(
            build_node(
                session,
                "custom_hook",
                invocation.name,
                DATA_STORE,
                invocation,
                category="custom-hook",
                processor=self.id,
                variables=roles,
                data_values=[name for name, role in roles.items() if role != ROLE_FUNCTION],
                function_values=[name for name, role in roles.items() if role == ROLE_FUNCTION],
                verdicts=invocation.metadata.get("verdicts"),
                aliases={
                    variable: invocation.property_of(variable)
                    for variable in invocation.variables
                    if invocation.property_of(variable) != variable
                },
            )
        )
        return result


__all__ = ["CustomHookProcessor"]
