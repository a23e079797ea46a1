# tests/test_packaging.py

from __future__ import annotations

import tomllib
from pathlib import Path


PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_server_modules_stay_out_of_site_packages() -> None:
    # main/config/database/api/core/models are generic names; they are only importable from server/
    config = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))
    setuptools = config["tool"]["setuptools"]

    assert setuptools["packages"] == []
    assert setuptools["py-modules"] == []
    assert config["tool"]["pytest"]["ini_options"]["pythonpath"] == ["server"]
