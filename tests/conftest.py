from __future__ import annotations

import sys
from pathlib import Path

import pytest

# lambda/ is not a package ("lambda" is a keyword), import handler.py directly.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "lambda"))


@pytest.fixture
def binary_artifact(tmp_path):
    """A stand-in for the compiled crud-lambda output directory."""
    artifact = tmp_path / "crud-lambda"
    artifact.mkdir()
    bootstrap = artifact / "bootstrap"
    bootstrap.write_text("#!/bin/sh\n")
    bootstrap.chmod(0o755)
    return artifact


@pytest.fixture
def python_artifact():
    return ROOT / "lambda"
