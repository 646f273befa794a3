"""
Unit tests for the package layout
"""

from pathlib import Path

import decl_reorganizer


def test_library_modules_have_no_shebang():
    package_dir = Path(decl_reorganizer.__file__).parent

    for module in package_dir.rglob("*.py"):
        assert not module.read_text(encoding="utf-8").startswith("#!"), module
