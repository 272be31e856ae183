import numpy as np
import pytest
from hypothesis import settings

# JIT compilation on first call blows any per-example deadline
settings.register_profile("warpds", deadline=None, max_examples=60)
settings.load_profile("warpds")


@pytest.fixture
def sample():
    return np.array([50, 20, 80, 10, 30, 70, 90, 25, 35, 65], dtype=np.int64)
