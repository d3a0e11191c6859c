"""Static source scanners run before hook dispatch."""

from __future__ import annotations

from .atoms import TREE_SITTER_AVAILABLE, AtomScanner, scan_atom_definitions

__all__ = ["AtomScanner", "TREE_SITTER_AVAILABLE", "scan_atom_definitions"]
