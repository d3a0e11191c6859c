"""Type oracle contract and a table-backed implementation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, runtime_checkable

from ..logging import get_logger
from ..models import SourcePosition
from .type_shapes import is_function_type

logger = get_logger("classification.oracle")

DEFAULT_ORACLE_TIMEOUT = 2.0


class TypeOracleError(RuntimeError):
    """Raised when a type oracle cannot answer a query."""


@dataclass(frozen=True)
class TypeResolution:
    """Declared type of one binding as reported by a type oracle."""

    type_string: str
    is_function: bool


@runtime_checkable
class TypeOracle(Protocol):
    """Best-effort language service answering declared-type queries."""

    async def resolve_type(
        self,
        file_path: Optional[str],
        position: Optional[SourcePosition],
        property_name: str,
    ) -> TypeResolution:
        ...


class StaticTypeOracle:
    """Answers type queries from a ``name -> type string`` table.

    Useful when an extractor already knows declared types (the ``types``
    section of an analysis document) and no live language service exists.
    """

    def __init__(self, types: Mapping[str, str]) -> None:
        self._types = dict(types)

    async def resolve_type(
        self,
        file_path: Optional[str],
        position: Optional[SourcePosition],
        property_name: str,
    ) -> TypeResolution:
        type_string = self._types.get(property_name)
        if type_string is None:
            raise TypeOracleError(f"No declared type for '{property_name}'")
        return TypeResolution(type_string=type_string, is_function=is_function_type(type_string))


async def query_oracle(
    oracle: TypeOracle,
    file_path: Optional[str],
    position: Optional[SourcePosition],
    property_name: str,
    *,
    timeout: float = DEFAULT_ORACLE_TIMEOUT,
) -> Optional[TypeResolution]:
    """Ask ``oracle`` for a type, returning None on failure, timeout or bad data."""
    try:
        result = await asyncio.wait_for(
            oracle.resolve_type(file_path, position, property_name), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.debug("Type oracle timed out after %.2fs for %s", timeout, property_name)
        return None
    except Exception as exc:  # third-party oracles may raise anything
        logger.debug("Type oracle failed for %s: %s", property_name, exc)
        return None
    if not isinstance(result, TypeResolution) or not isinstance(result.type_string, str):
        logger.debug("Type oracle returned a malformed answer for %s: %r", property_name, result)
        return None
    return result


__all__ = [
    "DEFAULT_ORACLE_TIMEOUT",
    "StaticTypeOracle",
    "TypeOracle",
    "TypeOracleError",
    "TypeResolution",
    "query_oracle",
]
