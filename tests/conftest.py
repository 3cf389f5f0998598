from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from contractweaver.models import StructureDescriptor
from tests._fixtures.php_project import PhpProjectBuilder, account_structure


@pytest.fixture(autouse=True)
def _reset_contractweaver_logger() -> Iterator[None]:
    """Drop handlers installed by configure_logging so tests do not leak them."""
    yield
    logger = logging.getLogger("contractweaver")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def php_project(tmp_path: Path) -> PhpProjectBuilder:
    """Provide a reusable PHP project builder rooted at the pytest tmp_path."""
    return PhpProjectBuilder(tmp_path)


@pytest.fixture
def account() -> StructureDescriptor:
    return account_structure()
