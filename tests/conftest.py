import sys
from pathlib import Path

# Ensure the project root is on sys.path so `mathsteps` and `backend` are importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from mathsteps.config import EngineConfig
from mathsteps.symbolic import SymbolicEngine


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(config) -> SymbolicEngine:
    return SymbolicEngine(config)
