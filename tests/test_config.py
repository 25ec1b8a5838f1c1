"""Tests for configuration loading and logging setup."""

import logging
import os
import pytest
from config import load_environment
from config.loader import DEFAULT_CONFIG, load_config, get_max_length, _merge_configs
from core.exceptions import ConfigurationError
import logger_config


@pytest.fixture
def config_paths(tmp_path, monkeypatch):
    base = tmp_path / "config.yaml"
    user = tmp_path / "user_config.yaml"
    monkeypatch.setenv("CONTEXT_CONFIG_PATH", str(base))
    monkeypatch.setenv("CONTEXT_USER_CONFIG_PATH", str(user))
    return base, user


def test_defaults_when_files_missing(config_paths):
    assert load_config() == DEFAULT_CONFIG


def test_user_config_overrides_base(config_paths):
    base, user = config_paths
    base.write_text("context:\n  max_length: 4000\nstorage:\n  project_root: novels/a\n", encoding="utf-8")
    user.write_text("context:\n  max_length: 1200\n", encoding="utf-8")

    config = load_config()

    assert get_max_length(config) == 1200
    assert config["storage"]["project_root"] == "novels/a"
    assert config["logging"] == DEFAULT_CONFIG["logging"]


def test_merge_does_not_mutate_defaults():
    merged = _merge_configs(DEFAULT_CONFIG, {"context": {"max_length": 1}})

    assert merged["context"]["max_length"] == 1
    assert DEFAULT_CONFIG["context"]["max_length"] == 8000


def test_invalid_yaml_raises(config_paths):
    base, _ = config_paths
    base.write_text("context: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config()


def test_non_mapping_yaml_raises(config_paths):
    base, _ = config_paths
    base.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config()


def test_bad_max_length_raises():
    with pytest.raises(ConfigurationError):
        get_max_length({"context": {"max_length": "lots"}})


def test_load_environment_reads_dotenv(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CONTEXT_ENGINE_TEST_FLAG=on\n", encoding="utf-8")
    monkeypatch.delenv("CONTEXT_ENGINE_TEST_FLAG", raising=False)

    assert load_environment(str(env_file)) is True
    assert os.environ["CONTEXT_ENGINE_TEST_FLAG"] == "on"
    monkeypatch.delenv("CONTEXT_ENGINE_TEST_FLAG")


def test_setup_logging_writes_to_file(tmp_path):
    saved_handlers = logging.root.handlers[:]
    saved_level = logging.root.level
    try:
        logger_config.setup_logging_from_config({"logging": {"dir": str(tmp_path), "level": "debug"}})
        logging.getLogger("tests").info("hello log")
        for handler in logging.root.handlers:
            handler.flush()

        assert logging.root.level == logging.DEBUG
        assert "hello log" in (tmp_path / logger_config.LOG_FILE_NAME).read_text(encoding="utf-8")
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            logging.root.addHandler(handler)
        logging.root.setLevel(saved_level)
        logging.captureWarnings(False)
