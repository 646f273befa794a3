"""
Pytest configuration and shared fixtures
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from decl_reorganizer.core.code_items import (
    AccessModifier,
    DeclarationItem,
    KindCodeItem,
)
from decl_reorganizer.core.config import Config
from decl_reorganizer.core.text_buffer import TextBuffer


@pytest.fixture
def declare():
    """Factory creating an item whose span covers a snippet of the buffer"""

    def _declare(
        buffer: TextBuffer,
        snippet: str,
        kind: KindCodeItem,
        name: str = "",
        access: AccessModifier | None = AccessModifier.PUBLIC,
        **kwargs,
    ) -> DeclarationItem:
        start = buffer.text.index(snippet)
        return DeclarationItem(
            kind=kind,
            span=buffer.create_span(start, start + len(snippet)),
            name=name,
            access=access,
            **kwargs,
        )

    return _declare


@pytest.fixture
def unordered_python_source() -> str:
    """Python class whose members are out of order"""
    return """import os


class Service:
    def run(self):
        return os.getcwd()

    # Shared limit
    LIMIT = 10

    def __init__(self):
        self.value = 1

    name = "svc"
"""


@pytest.fixture
def ordered_python_source() -> str:
    """unordered_python_source after reorganization"""
    return """import os


class Service:
    # Shared limit
    LIMIT = 10

    name = "svc"

    def __init__(self):
        self.value = 1

    def run(self):
        return os.getcwd()
"""


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Configuration writing its backups below tmp_path"""
    config = Config()
    config.backup.directory = str(tmp_path / "backups")
    return config
