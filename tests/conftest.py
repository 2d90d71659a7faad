import jax.numpy as jnp
import pytest

from cosmojax.config import set_dtype, set_max_frame_depth


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision and the default frame depth before every test.

    Tests that need another dtype (e.g. test_config.py) override it in
    their own autouse fixture.
    """
    set_dtype(jnp.float64)
    set_max_frame_depth(16)
