from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from beartype import beartype
from pydantic import BaseModel, ConfigDict, ValidationError
from yaml import MappingNode, ScalarNode
from yaml.loader import SafeLoader

from almost.exceptions import AlmostError
from almost.logs.structlog import logger

CONFIG_SECTION = "almost"


class ConfigError(AlmostError):
    """Raised when configuration loading or validation fails."""

    pass


@beartype
class ComparisonConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    # Tolerance range checks; they never run under `python -O` regardless of this flag.
    check_contracts: bool = True


class EnvVarLoader(SafeLoader):
    """YAML loader that substitutes `${VAR}` with the value of the environment variable."""

    def __init__(self, stream: str | bytes) -> None:
        super().__init__(stream)

    def construct_scalar(self, node: ScalarNode | MappingNode) -> str:
        value: str = super().construct_scalar(node)
        if isinstance(value, str):
            for match in re.finditer(r"\$\{([^}^{]+)\}", value):
                env_var: str = match.group(1)
                value = value.replace(f"${{{env_var}}}", os.environ.get(env_var, ""))
        return value


@beartype
def load_from_yaml(path: str | Path) -> dict[str, object]:
    """
    Load a YAML config file with environment variable interpolation.

    Raises:
        ConfigError: If the file does not exist, the YAML is invalid or its
            root is not a mapping.
    """
    config_path: Path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data: dict[str, object] = yaml.load(f, Loader=EnvVarLoader)
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping (dict).")
        return data
    except yaml.YAMLError as err:
        raise ConfigError(f"YAML parsing error: {err}") from err


@beartype
def load_config(path: str | Path) -> ComparisonConfig:
    """
    Build a ComparisonConfig from a YAML file.

    Settings are read from the `almost:` section when present, otherwise from
    the root mapping. An empty section yields the defaults.
    """
    data = load_from_yaml(path)
    section = data.get(CONFIG_SECTION, data)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping (dict).")
    try:
        return ComparisonConfig.model_validate(section)
    except ValidationError as err:
        raise ConfigError(f"Invalid comparison config in {path}: {err}") from err


_active_config: ComparisonConfig = ComparisonConfig()


@beartype
def configure(config: ComparisonConfig) -> None:
    """Replace the process-wide comparison config."""
    global _active_config
    _active_config = config
    logger.info("Comparison config applied", check_contracts=config.check_contracts)


def get_config() -> ComparisonConfig:
    return _active_config
