from pathlib import Path
from dotenv import load_dotenv

# Optional .env next to the backend/ directory; real environment wins
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

import os
from typing import Union

import yaml
from pydantic import BaseModel, ValidationError

from ros_bridge.core.errors import ConfigError
from ros_bridge.core.logging import logger
from ros_bridge.schemas.config import Config


class Settings(BaseModel):
    CONFIG_FILE: str = os.getenv("ROS_BRIDGE_CONFIG", "config.yaml")
    LOG_LEVEL: str = os.getenv("ROS_BRIDGE_LOG_LEVEL", "info")
    LOG_FORMAT: str = os.getenv("ROS_BRIDGE_LOG_FORMAT", "logfmt")


settings = Settings()


def load_config(path: Union[str, Path]) -> Config:
    """
    Read, decode, validate and normalize the YAML configuration file

    Raises:
        ConfigError: file unreadable, not YAML, wrong shape or incomplete
    """
    path = Path(path)
    logger.debug(f"loading config file={path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config file '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse config file '{path}': {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config file '{path}' must contain a mapping at top level")

    try:
        config = Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config file '{path}': {e}") from e

    config.normalize()
    logger.debug(f"config loaded aliases={len(config.aliases)} devices={len(config.devices)}")
    return config
