"""End-to-end analysis: classify hooks, dispatch them and assemble the DFD."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List

from .assembler import GraphAssembler
from .classification import HookClassifier, NamingHeuristic, StaticTypeOracle, TypeOracle
from .config import DFDGenConfig
from .loader import ExtractionError, analysis_from_dict
from .logging import get_logger
from .models import AnalysisResult, AtomDefinition, ComponentAnalysis, DFDGraph, NotAnalyzable
from .processors import DispatchOutcome, Processor, ProcessorRegistry, create_registry
from .processors.session import AnalysisSession
from .scanners import AtomScanner

RegistryFactory = Callable[[], ProcessorRegistry]


@dataclass
class AnalysisRun:
    """A finished analysis: the session holding the graph and each dispatch outcome."""

    session: AnalysisSession
    outcomes: List[DispatchOutcome]

    @property
    def graph(self) -> DFDGraph:
        return self.session.graph


def merge_atoms(
    declared: Iterable[AtomDefinition], scanned: Iterable[AtomDefinition]
) -> List[AtomDefinition]:
    """Combine atom definitions by name; declared entries replace scanned ones."""
    merged: Dict[str, AtomDefinition] = {atom.name: atom for atom in scanned}
    for atom in declared:
        merged[atom.name] = atom
    return list(merged.values())


class DFDPipeline:
    """Runs one component analysis per call.

    Every call builds a fresh :class:`ProcessorRegistry` and
    :class:`AnalysisSession`, so node ids, shared URL nodes and other
    resource caches never leak between analyses, even when several run
    concurrently on the same pipeline.
    """

    def __init__(
        self,
        config: DFDGenConfig | None = None,
        *,
        oracle: TypeOracle | None = None,
        registry_factory: RegistryFactory | None = None,
        atom_scanner: AtomScanner | None = None,
    ) -> None:
        self.config = config
        self.oracle = oracle
        self._registry_factory = registry_factory or self._default_registry
        self.atom_scanner = atom_scanner or AtomScanner()
        self.logger = get_logger("pipeline")

    def _default_registry(self) -> ProcessorRegistry:
        if self.config is None:
            return create_registry()
        processors = self.config.processors
        return create_registry(processors.enabled, processors.disabled)

    def processors(self) -> List[Processor]:
        """Processors in dispatch order."""
        return self._registry_factory().processors

    def _classifier(self, analysis: ComponentAnalysis) -> HookClassifier:
        oracle = self.oracle
        if oracle is None and analysis.types:
            oracle = StaticTypeOracle(analysis.types)
        if self.config is None:
            return HookClassifier(oracle)
        settings = self.config.classifier
        heuristic = NamingHeuristic(settings.function_prefixes, settings.function_names)
        return HookClassifier(oracle, heuristic=heuristic, oracle_timeout=settings.oracle_timeout)

    async def execute(self, analysis: ComponentAnalysis, source: str | None = None) -> AnalysisRun:
        """Classify, dispatch and assemble ``analysis``; returns the whole run."""
        self.logger.info("Analyzing component %s", analysis.name)
        scanned = self.atom_scanner.scan(source) if source else []
        atoms = merge_atoms(analysis.atoms, scanned)
        hooks = tuple(hook.fresh_copy() for hook in analysis.hooks)
        analysis = replace(analysis, hooks=hooks, atoms=tuple(atoms))

        classifier = self._classifier(analysis)
        for hook in hooks:
            # sequential: node ids follow invocation order
            await classifier.classify(hook, file_path=analysis.file_path)

        registry = self._registry_factory()
        session = AnalysisSession(analysis, atoms)
        outcomes = [registry.dispatch(hook, session) for hook in hooks]
        for outcome in outcomes:
            if not outcome.handled and outcome.error is None:
                self.logger.debug("Processor %s left %s unhandled", outcome.processor_id, outcome.hook)

        GraphAssembler(session).assemble()
        if session.faults:
            self.logger.info(
                "Analysis of %s finished with %d processor fault(s)", analysis.name, len(session.faults)
            )
        return AnalysisRun(session=session, outcomes=outcomes)

    async def analyze(self, analysis: ComponentAnalysis, source: str | None = None) -> DFDGraph:
        run = await self.execute(analysis, source)
        return run.graph

    def run(self, analysis: ComponentAnalysis, source: str | None = None) -> DFDGraph:
        """Synchronous wrapper around :meth:`analyze`."""
        return asyncio.run(self.analyze(analysis, source))

    async def analyze_document(
        self, payload: Any, source: str | None = None
    ) -> AnalysisResult:
        """Analyse a decoded document; malformed documents become :class:`NotAnalyzable`."""
        try:
            analysis = analysis_from_dict(payload)
        except ExtractionError as exc:
            self.logger.warning("Component is not analyzable: %s", exc)
            return NotAnalyzable(reason=str(exc), component=exc.component, file_path=exc.file_path)
        return await self.analyze(analysis, source)


__all__ = ["AnalysisRun", "DFDPipeline", "merge_atoms"]
