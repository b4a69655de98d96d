"""Configuration management for the agent chat demos."""

import os
import yaml
from dataclasses import dataclass
from typing import Any, Dict

from .errors import ConfigError
from .logging import DEFAULT_FORMAT


@dataclass
class BedrockConfig:
    """AWS Bedrock configuration."""
    model_id: str
    timeout: int
    max_retries: int
    temperature: float = 0.0
    max_tokens: int = 2048
    max_tool_rounds: int = 5


@dataclass
class GroupChatConfig:
    """Turn-taking settings for the multi-agent chat."""
    maximum_iterations: int = 10
    history_window: int = 1
    evaluate_name_only: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str
    format: str
    file: str = ""


@dataclass
class Config:
    """Main configuration class."""
    aws_region: str
    bedrock: BedrockConfig
    group_chat: GroupChatConfig
    logging: LoggingConfig

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "Config":
        """
        Load configuration from file and environment variables.

        Environment variables override config file values:
        - AWS_REGION
        - BEDROCK_MODEL_ID
        - MAX_ITERATIONS
        - LOG_LEVEL

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigError: If the file is missing or a value is invalid
        """
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise ConfigError.missing(config_path, e)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "Config":
        aws = config_data.get("aws") or {}
        bedrock_data = aws.get("bedrock") or {}
        chat_data = config_data.get("group_chat") or {}
        logging_data = config_data.get("logging") or {}

        aws_region = os.getenv("AWS_REGION", aws.get("region", "us-east-1"))

        model_id = os.getenv("BEDROCK_MODEL_ID", bedrock_data.get("model_id"))
        if not model_id:
            raise ConfigError.invalid("aws.bedrock.model_id", "a model id is required")

        bedrock_config = BedrockConfig(
            model_id=model_id,
            timeout=_as_int(bedrock_data.get("timeout", 120), "aws.bedrock.timeout"),
            max_retries=_as_int(bedrock_data.get("max_retries", 3), "aws.bedrock.max_retries"),
            temperature=float(bedrock_data.get("temperature", 0.0)),
            max_tokens=_as_int(bedrock_data.get("max_tokens", 2048), "aws.bedrock.max_tokens"),
            max_tool_rounds=_as_int(bedrock_data.get("max_tool_rounds", 5), "aws.bedrock.max_tool_rounds"),
        )

        maximum_iterations = _as_int(
            os.getenv("MAX_ITERATIONS", chat_data.get("maximum_iterations", 10)),
            "group_chat.maximum_iterations",
        )
        if maximum_iterations < 1:
            raise ConfigError.invalid("group_chat.maximum_iterations", "must be at least 1")

        history_window = _as_int(chat_data.get("history_window", 1), "group_chat.history_window")
        if history_window < 1:
            raise ConfigError.invalid("group_chat.history_window", "must be at least 1")

        group_chat_config = GroupChatConfig(
            maximum_iterations=maximum_iterations,
            history_window=history_window,
            evaluate_name_only=bool(chat_data.get("evaluate_name_only", True)),
        )

        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", logging_data.get("level", "INFO")),
            format=logging_data.get("format", DEFAULT_FORMAT),
            file=logging_data.get("file", "") or "",
        )

        return cls(
            aws_region=aws_region,
            bedrock=bedrock_config,
            group_chat=group_chat_config,
            logging=logging_config,
        )


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError.invalid(key, f"expected an integer, got {value!r}", e)
