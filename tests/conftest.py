from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.resource_tree import ResourceTreeBuilder


@pytest.fixture(autouse=True)
def _reset_rescat_logger() -> Iterator[None]:
    """Undo CLI logging configuration so caplog keeps seeing rescat records."""
    yield
    logger = logging.getLogger("rescat")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def tree_builder(tmp_path: Path) -> ResourceTreeBuilder:
    """Provide a reusable resource tree builder rooted at the pytest tmp_path."""
    return ResourceTreeBuilder(tmp_path)


@pytest.fixture
def sample_tree(tree_builder: ResourceTreeBuilder) -> ResourceTreeBuilder:
    """A builder pre-populated with one resource of every kind and an index."""
    tree_builder.write_sample()
    tree_builder.build()
    return tree_builder
