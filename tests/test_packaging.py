from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).parent.parent


def test_backend_modules_are_not_installed_top_level():
    with open(ROOT / "pyproject.toml", "rb") as f:
        setuptools_cfg = tomllib.load(f)["tool"]["setuptools"]

    assert setuptools_cfg["py-modules"] == []
    assert setuptools_cfg["packages"] == []
    assert "package-dir" not in setuptools_cfg
