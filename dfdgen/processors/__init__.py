"""Library processor implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Processor, ProcessorError, ProcessorMetadata, ProcessorResult
from .custom import CustomHookProcessor
from .data_fetching import (
    ApolloProcessor,
    RTKQueryProcessor,
    SWRProcessor,
    TanStackQueryProcessor,
    TRPCProcessor,
)
from .forms import ReactHookFormProcessor
from .jotai import JotaiProcessor
from .navigation import (
    NextNavigationProcessor,
    ReactRouterProcessor,
    SvelteKitProcessor,
    TanStackRouterProcessor,
    VueRouterProcessor,
)
from .react import ReactProcessor
from .registry import DispatchOutcome, ProcessorRegistry
from .session import AnalysisSession
from .stores import MobXProcessor, PiniaProcessor, ZustandProcessor
from .svelte import SvelteRunesProcessor, SvelteStoreProcessor
from .vue import VueProcessor

_ENTRY_POINT_GROUP = "dfdgen.processors"

# Registration order breaks priority ties: earlier entries win.
_BUILTIN_FACTORIES: dict[str, Callable[[], Processor]] = {
    "react": ReactProcessor,
    "vue": VueProcessor,
    "svelte": SvelteRunesProcessor,
    "pinia": PiniaProcessor,
    "zustand": ZustandProcessor,
    "swr": SWRProcessor,
    "tanstack-query": TanStackQueryProcessor,
    "apollo": ApolloProcessor,
    "rtk-query": RTKQueryProcessor,
    "trpc": TRPCProcessor,
    "jotai": JotaiProcessor,
    "next": NextNavigationProcessor,
    "react-router": ReactRouterProcessor,
    "tanstack-router": TanStackRouterProcessor,
    "react-hook-form": ReactHookFormProcessor,
    "mobx": MobXProcessor,
    "vue-router": VueRouterProcessor,
    "svelte-store": SvelteStoreProcessor,
    "sveltekit": SvelteKitProcessor,
    "custom-hook": CustomHookProcessor,
}

_REQUIRED = "custom-hook"


def discover_processors(
    enabled: Sequence[str] | None = None,
    disabled: Sequence[str] | None = None,
) -> List[Processor]:
    """Return instantiated processors, honoring optional enabled/disabled ids.

    The custom-hook fallback is always included so every invocation has a
    processor.
    """

    enabled_set: Set[str] | None = None
    if enabled:
        enabled_set = {name.lower() for name in enabled}
        enabled_set.add(_REQUIRED)
    disabled_set = {name.lower() for name in disabled or ()} - {_REQUIRED}

    processors: List[Processor] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Processor]) -> None:
        key = name.lower()
        if key in seen or key in disabled_set:
            return
        if enabled_set is not None and key not in enabled_set:
            return
        instance = factory()
        if not isinstance(instance, Processor):
            raise TypeError(f"Processor factory for '{name}' did not return a Processor instance")
        processors.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load processor entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Processor:
            return _coerce_processor(obj)

        _add(name, _factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown processors requested: {', '.join(sorted(missing))}")

    return processors


def create_registry(
    enabled: Sequence[str] | None = None,
    disabled: Sequence[str] | None = None,
) -> ProcessorRegistry:
    """Build a fresh registry; one is created for every analysis."""
    return ProcessorRegistry(discover_processors(enabled, disabled))


def _coerce_processor(obj: object) -> Processor:
    if isinstance(obj, Processor):
        return obj
    if isinstance(obj, type) and issubclass(obj, Processor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Processor):
            return instance
    raise TypeError("Processor entry point must be a Processor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "AnalysisSession",
    "DispatchOutcome",
    "Processor",
    "ProcessorError",
    "ProcessorMetadata",
    "ProcessorRegistry",
    "ProcessorResult",
    "create_registry",
    "discover_processors",
]
