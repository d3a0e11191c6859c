"""Jotai atom processor: one node per atom name, shared across accessors."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from ..logging import get_logger
from ..models import BINDING_ARRAY, DATA_STORE, ROLE_DATA, ROLE_FUNCTION, HookInvocation
from .base import LIBRARY_PRIORITY, Processor, ProcessorMetadata, ProcessorResult, build_node
from .session import AnalysisSession

logger = get_logger("processors.jotai")


def is_read_write_pair(read_variable: Optional[str], write_variable: Optional[str]) -> bool:
    """``[count, setCount]`` style naming."""
    if not read_variable or not write_variable:
        return False
    return write_variable == f"set{read_variable[:1].upper()}{read_variable[1:]}"


def _accessors(invocation: HookInvocation) -> Tuple[Optional[str], Optional[str]]:
    variables = invocation.variables
    if invocation.name == "useSetAtom":
        return None, variables[0] if variables else None
    if invocation.name == "useAtom" and invocation.binding == BINDING_ARRAY:
        read = variables[0] if variables else None
        write = variables[1] if len(variables) > 1 else None
        return read, write
    return (variables[0] if variables else None), None


class JotaiProcessor(Processor):
    metadata = ProcessorMetadata(
        id="jotai",
        library="jotai",
        package_patterns=("jotai", "jotai/*"),
        hook_names=("useAtom", "useAtomValue", "useSetAtom"),
        priority=LIBRARY_PRIORITY,
        description="Jotai atom accessors",
        frameworks=("react",),
    )

    def process(self, invocation: HookInvocation, session: AnalysisSession) -> ProcessorResult:
        result = ProcessorResult()
        atom_name = invocation.first_identifier()
        if atom_name is None:
            logger.warning("Cannot determine the atom passed to %s; skipping its node", invocation.name)
            result.handled = False
            return result

        read_variable, write_variable = _accessors(invocation)
        variables: Dict[str, str] = {}
        if read_variable:
            variables[read_variable] = ROLE_DATA
        if write_variable:
            variables[write_variable] = ROLE_FUNCTION

        key = f"atom:{atom_name}"
        existing = session.resource(key)
        if existing is not None:
            result.update(existing.id, **self._augment(existing.metadata, read_variable, write_variable, variables))
            return result

        definition = session.atoms.get(atom_name)
        dependencies = list(definition.dependencies) if definition is not None else []
        node = build_node(
            session,
            "jotai_atom",
            atom_name,
            DATA_STORE,
            invocation,
            category="jotai-atom",
            processor=self.id,
            atom_name=atom_name,
            read_variable=read_variable,
            write_variable=write_variable,
            read_variables=[read_variable] if read_variable else [],
            write_variables=[write_variable] if write_variable else [],
            variables=variables,
            writers=[write_variable] if write_variable else [],
            is_read_write_pair=is_read_write_pair(read_variable, write_variable),
            is_derived=bool(definition and definition.derived),
            atom_dependencies=dependencies,
            dependencies=dependencies,
            dependency_label="derives",
        )
        result.add_node(node, resource_key=key)
        return result

    @staticmethod
    def _augment(
        current: Dict[str, Any],
        read_variable: Optional[str],
        write_variable: Optional[str],
        variables: Dict[str, str],
    ) -> Dict[str, Any]:
        patch: Dict[str, Any] = {"variables": variables}
        if read_variable:
            patch["read_variables"] = [read_variable]
            if not current.get("read_variable"):
                patch["read_variable"] = read_variable
        if write_variable:
            patch["write_variables"] = [write_variable]
            patch["writers"] = [write_variable]
            if not current.get("write_variable"):
                patch["write_variable"] = write_variable
        read = patch.get("read_variable", current.get("read_variable"))
        write = patch.get("write_variable", current.get("write_variable"))
        patch["is_read_write_pair"] = is_read_write_pair(read, write)
        return patch


__all__ = ["JotaiProcessor", "is_read_write_pair"]
