import json
from pathlib import Path

import pytest

from app.config import EnvironmentConfig, load_environments
from app.errors import ConfigLoadError, UnknownEnvironmentError


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_environments(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        json.dumps({"environments": {"prod": {"segment_write_key": "k1"}, "dev": {"segment_write_key": "k2"}}}),
    )

    config = load_environments(path)

    assert config.get("prod").segment_write_key == "k1"
    assert config.names() == ["dev", "prod"]


def test_unknown_environment() -> None:
    config = EnvironmentConfig()

    with pytest.raises(UnknownEnvironmentError) as exc_info:
        config.get("missing")

    assert exc_info.value.status_code == 400
    assert "missing" in exc_info.value.message


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_environments(tmp_path / "nope.json")


def test_malformed_json(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_environments(_write(tmp_path, "{not json"))


def test_wrong_shape(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_environments(_write(tmp_path, json.dumps({"environments": {"prod": {}}})))


def test_config_is_read_only(tmp_path: Path) -> None:
    config = load_environments(_write(tmp_path, json.dumps({"environments": {}})))

    with pytest.raises(Exception):
        config.environments = {}
