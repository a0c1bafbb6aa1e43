from __future__ import annotations

from pathlib import Path

import pytest

from vizlessons.config import ConfigError, load_settings


def test_defaults_without_environment() -> None:
    s = load_settings(env={})
    assert s.dpi == 120
    assert s.offline is False
    assert s.data_dir is None
    assert s.output_dir == Path("lessons_out")
    assert s.log_level == "WARNING"


def test_environment_values_are_parsed() -> None:
    s = load_settings(
        env={
            "VIZLESSONS_DPI": "200",
            "VIZLESSONS_OFFLINE": "yes",
            "VIZLESSONS_DATA_DIR": "/tmp/lesson-data",
            "VIZLESSONS_LOG_LEVEL": "info",
        }
    )
    assert s.dpi == 200
    assert s.offline is True
    assert s.data_dir == Path("/tmp/lesson-data")
    assert s.log_level == "INFO"


def test_none_overrides_are_ignored() -> None:
    s = load_settings(env={"VIZLESSONS_DPI": "90"}, dpi=None, offline=True)
    assert s.dpi == 90
    assert s.offline is True


@pytest.mark.parametrize(
    "env",
    [
        {"VIZLESSONS_DPI": "abc"},
        {"VIZLESSONS_DPI": "0"},
        {"VIZLESSONS_OFFLINE": "maybe"},
        {"VIZLESSONS_LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_values_raise_config_error(env: dict[str, str]) -> None:
    with pytest.raises(ConfigError):
        load_settings(env=env)
