import pytest

from ._world import World, make_config


@pytest.fixture()
def world() -> World:
    return World()


@pytest.fixture()
def listed() -> World:
    """A world where ALICE has already listed the unit at PRICE."""
    w = World()
    res = w.init()
    assert res.is_success, res.error
    return w


@pytest.fixture()
def config():
    return make_config()
