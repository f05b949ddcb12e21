"""Test configuration helpers."""
import random
import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_path():
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_ensure_repo_root_on_path()


@pytest.fixture
def rng():
    """Deterministic coefficient source for reproducible tests."""
    return random.Random(1234)
