# tests/conftest.py
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def hanoi_path() -> Path:
    return FIXTURES / "hanoi.asl"


@pytest.fixture
def hanoi_source(hanoi_path) -> str:
    return hanoi_path.read_text()


@pytest.fixture
def broken_path() -> Path:
    return FIXTURES / "hanoi_broken.asl"
