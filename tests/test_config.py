"""
Tests for configuration loading and helpers
"""
import pytest

from buzzhub.config import load_config
from buzzhub.utils import clean_name, parse_ms, parse_option_index, to_base36


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BUZZHUB_CONFIG", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    config = load_config()
    assert config.port == 3000
    assert config.auto.choice_duration_ms == 15000
    assert config.questions_file.endswith("questions.json")


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_yaml_values_and_port_override(tmp_path, monkeypatch):
    path = tmp_path / "server.yaml"
    path.write_text("port: 4000\nauto:\n  enabled: true\n  between_ms: 100\n", encoding="utf-8")
    monkeypatch.delenv("PORT", raising=False)
    config = load_config(str(path))
    assert config.port == 4000
    assert config.auto.enabled is True
    assert config.auto.between_ms == 100

    monkeypatch.setenv("PORT", "5555")
    assert load_config(str(path)).port == 5555


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)).host == "0.0.0.0"


def test_clean_name():
    assert clean_name(None) == "anon"
    assert clean_name("  taro ") == "taro"
    assert clean_name(42) == "42"


def test_parse_option_index():
    assert parse_option_index(0) == 0
    assert parse_option_index(3) == 3
    assert parse_option_index(4) is None
    assert parse_option_index("1") is None
    assert parse_option_index(False) is None


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"


def test_parse_option_index_whole_floats():
    assert parse_option_index(2.0) == 2
    assert isinstance(parse_option_index(2.0), int)
    assert parse_option_index(2.5) is None
    assert parse_option_index(4.0) is None


def test_parse_ms():
    assert parse_ms("1500") == 1500
    assert parse_ms(2.9) == 2
    for bad in (float("inf"), float("-inf"), float("nan"), "soon"):
        with pytest.raises(ValueError):
            parse_ms(bad)
