import copy

import pytest

from gameverse import config as config_module
from gameverse.config import Config, clear_runtime_overrides, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Every test sees the built-in defaults, never a local config.json or .env."""
    cfg = Config(copy.deepcopy(config_module._DEFAULT_CONFIG))
    set_config(cfg)
    clear_runtime_overrides()
    yield cfg
    set_config(None)
    clear_runtime_overrides()
