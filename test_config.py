"""Tests for configuration loading."""

from pathlib import Path

import pytest

from agentdemo.utils.config import Config
from agentdemo.utils.errors import ConfigError, ErrorType

CONFIG_YAML = """
aws:
  region: eu-west-1
  bedrock:
    model_id: amazon.nova-lite-v1:0
    timeout: 30
    max_retries: 2
group_chat:
  maximum_iterations: 6
  history_window: 2
  evaluate_name_only: false
logging:
  level: DEBUG
  format: "%(levelname)s %(message)s"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AWS_REGION", "BEDROCK_MODEL_ID", "MAX_ITERATIONS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path, text=CONFIG_YAML):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_reads_yaml(tmp_path):
    config = Config.load(_write(tmp_path))

    assert config.aws_region == "eu-west-1"
    assert config.bedrock.model_id == "amazon.nova-lite-v1:0"
    assert config.bedrock.max_retries == 2
    assert config.bedrock.max_tool_rounds == 5
    assert config.group_chat.maximum_iterations == 6
    assert config.group_chat.history_window == 2
    assert config.group_chat.evaluate_name_only is False
    assert config.logging.level == "DEBUG"
    assert config.logging.file == ""


def test_environment_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv("AWS_REGION", "us-west-2")
    monkeypatch.setenv("BEDROCK_MODEL_ID", "anthropic.claude-3-haiku")
    monkeypatch.setenv("MAX_ITERATIONS", "3")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    config = Config.load(_write(tmp_path))

    assert config.aws_region == "us-west-2"
    assert config.bedrock.model_id == "anthropic.claude-3-haiku"
    assert config.group_chat.maximum_iterations == 3
    assert config.logging.level == "WARNING"


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        Config.load(str(tmp_path / "nope.yaml"))
    assert exc_info.value.context.error_type == ErrorType.CONFIG_MISSING


@pytest.mark.parametrize("text", [
    "aws: {bedrock: {}}",
    "aws: {bedrock: {model_id: m}}\ngroup_chat: {maximum_iterations: 0}",
    "aws: {bedrock: {model_id: m}}\ngroup_chat: {history_window: 0}",
    "aws: {bedrock: {model_id: m, timeout: soon}}",
])
def test_invalid_values_raise_config_error(tmp_path, text):
    with pytest.raises(ConfigError) as exc_info:
        Config.load(_write(tmp_path, text))
    assert exc_info.value.context.error_type == ErrorType.CONFIG_INVALID


def test_repository_config_is_valid():
    config = Config.load(str(Path(__file__).parent / "config.yaml"))
    assert config.group_chat.maximum_iterations == 10
    assert config.group_chat.history_window == 1
