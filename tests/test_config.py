"""
Harvest Configuration Tests
"""

import json

import pytest

from reconstitute.config import ENV_CONFIG_PATH, HarvestConfig, load_config
from reconstitute.contracts.base import ConfigError, ErrorCode


def test_defaults():
    config = HarvestConfig()
    assert config.step_fraction == 0.9
    assert config.settle_delay == 0.85
    assert config.stall_limit == 26
    assert config.confirm_stall == 3
    assert config.end_epsilon == 10


@pytest.mark.parametrize("kwargs", [
    {"step_fraction": 0},
    {"step_fraction": 1.5},
    {"settle_delay": -0.1},
    {"stall_limit": 0},
    {"confirm_stall": 0},
    {"stall_limit": 2, "confirm_stall": 3},
    {"end_epsilon": -1},
])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ConfigError) as excinfo:
        HarvestConfig(**kwargs)
    assert excinfo.value.code is ErrorCode.INVALID_CONFIG


def test_load_without_sources_gives_defaults():
    assert load_config(environ={}) == HarvestConfig()


def test_file_then_environment(tmp_path):
    path = tmp_path / "harvest.json"
    path.write_text(json.dumps({"stall_limit": 40, "settle_delay": 0.2}), encoding="utf-8")

    config = load_config(path, environ={"RECONSTITUTE_SETTLE_DELAY": "0"})

    assert config.stall_limit == 40
    assert config.settle_delay == 0.0


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "harvest.json"
    path.write_text(json.dumps({"confirm_stall": 5}), encoding="utf-8")
    config = load_config(environ={ENV_CONFIG_PATH: str(path)})
    assert config.confirm_stall == 5


@pytest.mark.parametrize("content", ["[1, 2]", "{bad json", '{"unknown_key": 1}', '{"stall_limit": "many"}'])
def test_bad_config_files(tmp_path, content):
    path = tmp_path / "harvest.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError, match="cannot read config"):
        load_config(tmp_path / "absent.json", environ={})


def test_bad_environment_value():
    with pytest.raises(ConfigError, match="environment"):
        load_config(environ={"RECONSTITUTE_STALL_LIMIT": "lots"})


def test_to_dict():
    assert HarvestConfig().to_dict()["stall_limit"] == 26
