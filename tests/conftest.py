import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from Grid import GridHex


@pytest.fixture
def grid5():
    """5x5 grid with unit spacing."""
    return GridHex(np.arange(5.0), np.arange(5.0))


@pytest.fixture
def circle():
    """Fine grid on [-1,1]^2 and the exact signed distance to the circle r=0.5."""
    grid = GridHex(np.linspace(-1, 1, 101), np.linspace(-1, 1, 101))
    phi = grid.flatten(np.sqrt(grid.X**2 + grid.Y**2) - 0.5)
    return grid, phi
