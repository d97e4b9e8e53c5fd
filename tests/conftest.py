from __future__ import annotations

from pathlib import Path

import pytest

from docmigrate.models import TransformContext
from tests._fixtures.docs_builder import DocsTreeBuilder


@pytest.fixture
def docs_builder(tmp_path: Path) -> DocsTreeBuilder:
    """Provide a reusable documentation tree builder rooted at the pytest tmp_path."""
    return DocsTreeBuilder(tmp_path)


@pytest.fixture
def sdk_context() -> TransformContext:
    return TransformContext(product="sdk", version="v0.52", known_products=("sdk", "ibc", "evm"))
