from pathlib import Path

import pytest

from fast_reader.config import ReaderConfig, config_from_dict, config_from_yaml, load_config


def test_load_config_defaults():
    config = load_config()
    assert config == ReaderConfig()
    assert config.default_wpm == 250
    assert config.max_file_size == 50 * 1024 * 1024
    assert config.max_positions == 50
    assert config.max_position_age_days == 30


def test_config_from_dict_ignores_unknown_keys():
    config = config_from_dict({"default_wpm": 320, "unknown": True})
    assert config.default_wpm == 320
    assert config_from_dict(None) == ReaderConfig()


def test_config_from_yaml(tmp_path: Path):
    path = tmp_path / "reader.yaml"
    path.write_text(
        "default_wpm: 200\npositions_path: ~/positions.json\n", encoding="utf-8"
    )
    config = config_from_yaml(path)
    assert config.default_wpm == 200
    assert config.resolved_positions_path == Path("~/positions.json").expanduser()


def test_empty_yaml_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ReaderConfig()


def test_yaml_must_be_a_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        config_from_yaml(path)


def test_to_dict_round_trips():
    config = ReaderConfig(default_wpm=180)
    assert config_from_dict(config.to_dict()) == config
