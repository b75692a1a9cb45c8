import collections

import pytest

from xyexplorer.model.engine import SimulationHandle, load_engine_factory
from xyexplorer.model.errors import EngineLoadError


def test_loads_callable_attribute():
    assert load_engine_factory("collections:OrderedDict") is collections.OrderedDict


@pytest.mark.parametrize("path", [
    "xyexplorer_missing_engine:XY",
    "collections",
    "collections:NoSuchEngine",
    "math:pi",
    ":XY",
])
def test_bad_engine_paths(path):
    with pytest.raises(EngineLoadError):
        load_engine_factory(path)


def test_engine_load_error_is_import_error():
    assert issubclass(EngineLoadError, ImportError)


def test_fake_engine_satisfies_handle_protocol(factory):
    assert isinstance(factory(4, 1.0, 1.0, 0.0), SimulationHandle)
