"""Ordered processor registry and single-pass dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..logging import get_logger
from ..models import HookInvocation
from .base import Processor
from .session import AnalysisSession

logger = get_logger("processors.registry")


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened to one invocation during dispatch."""

    hook: str
    processor_id: str
    handled: bool
    node_ids: tuple = ()
    error: Optional[str] = None


class ProcessorRegistry:
    """Processors ordered by descending priority, then by registration order.

    The first processor whose predicate matches receives the invocation;
    no other processor sees it. Two processors with equal priority that
    both match resolve in favour of the one registered first.
    """

    def __init__(self, processors: Iterable[Processor] = ()) -> None:
        self._entries: List[tuple[int, Processor]] = []
        for processor in processors:
            self.register(processor)

    def register(self, processor: Processor) -> None:
        if not isinstance(processor, Processor):
            raise TypeError(f"Expected a Processor instance, got {type(processor).__name__}")
        if any(existing.id == processor.id for _, existing in self._entries):
            raise ValueError(f"Processor '{processor.id}' is already registered")
        self._entries.append((len(self._entries), processor))

    @property
    def processors(self) -> List[Processor]:
        ordered = sorted(self._entries, key=lambda entry: (-entry[1].priority, entry[0]))
        return [processor for _, processor in ordered]

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, processor_id: str) -> Optional[Processor]:
        for _, processor in self._entries:
            if processor.id == processor_id:
                return processor
        return None

    def select(self, invocation: HookInvocation, framework: Optional[str] = None) -> Processor:
        for processor in self.processors:
            if processor.matches(invocation, framework):
                return processor
        raise LookupError(f"No processor accepts hook '{invocation.name}'")

    def dispatch(self, invocation: HookInvocation, session: AnalysisSession) -> DispatchOutcome:
        """Route ``invocation`` to its processor and commit the result to ``session``.

        Failures inside the processor are logged and recorded on the session;
        the processor's partial output is discarded and dispatch continues
        with the next invocation.
        """
        processor = self.select(invocation, session.framework)
        logger.debug("Dispatching %s to %s", invocation.name, processor.id)
        try:
            result = processor.process(invocation, session)
            session.commit(result)
        except Exception as exc:
            logger.warning(
                "Processor %s failed on %s: %s", processor.id, invocation.name, exc
            )
            session.record_fault(processor.id, invocation.name, str(exc))
            return DispatchOutcome(
                hook=invocation.name,
                processor_id=processor.id,
                handled=False,
                error=str(exc),
            )
        return DispatchOutcome(
            hook=invocation.name,
            processor_id=processor.id,
            handled=result.handled,
            node_ids=tuple(node.id for node in result.nodes),
        )


__all__ = ["DispatchOutcome", "ProcessorRegistry"]
