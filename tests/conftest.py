from __future__ import annotations

import logging
from typing import Iterator

import pytest

from dfdgen.pipeline import DFDPipeline
from dfdgen.scanners import AtomScanner


@pytest.fixture
def pipeline() -> DFDPipeline:
    """Pipeline with default processors, no oracle and no source scanning."""
    return DFDPipeline(atom_scanner=AtomScanner(enabled=False))


@pytest.fixture(autouse=True)
def _reset_dfdgen_logger() -> Iterator[None]:
    """CLI tests configure logging; restore propagation so caplog keeps working."""
    yield
    logger = logging.getLogger("dfdgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
