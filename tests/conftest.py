import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest

from rulelist import RuleTable


@pytest.fixture
def small_table():
    """4 samples: A={0,1}, B={1,2}, C={3}, default D matches everything."""
    truthtables = np.array([
        [1, 1, 1, 1],  # D
        [1, 1, 0, 0],  # A
        [0, 1, 1, 0],  # B
        [0, 0, 0, 1],  # C
    ], dtype=bool)
    return RuleTable(truthtables, labels=['D', 'A', 'B', 'C'])


@pytest.fixture
def random_table():
    rng = np.random.RandomState(7)
    truthtables = rng.rand(25, 80) < 0.25
    truthtables[0] = True
    return RuleTable(truthtables)
