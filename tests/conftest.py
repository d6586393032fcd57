import pytest

from chainparams import registry


@pytest.fixture(autouse=True)
def reset_default_registry():
    registry.DEFAULT_REGISTRY.reset()
    yield
    registry.DEFAULT_REGISTRY.reset()
