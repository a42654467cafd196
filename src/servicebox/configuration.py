"""
Configuration Management for servicebox Containers

🔧 Configuration-Driven Wiring:
Bindings can be declared in a dictionary, a JSON/YAML file or through
environment variables instead of code. A ContainerConfig is validated up
front and then applied to a container:

    config = ContainerConfig.from_file("services.yaml")
    container = Container.from_config(config)

File layout:

    logging:
      level: DEBUG
    bindings:
      - interface: myapp.storage.Repository
        concrete: myapp.storage.SqlRepository
        singleton: true
        parameters: {dsn: "sqlite:///:memory:"}
      - interface: myapp.mail.Mailer
        factory: myapp.mail.build_mailer
        enforce: [transport]
"""

import json
import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError
from .reflection import locate

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SERVICEBOX_CONFIG"
LOG_LEVEL_ENV_VAR = "SERVICEBOX_LOG_LEVEL"

_HANDLER_NAME = "servicebox"


class LoggingConfig(BaseModel):
    """Logging configuration"""
    model_config = ConfigDict(validate_assignment=True)

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


class BindingConfig(BaseModel):
    """A single service binding"""
    model_config = ConfigDict(extra="forbid")

    interface: str
    concrete: Optional[str] = None
    factory: Optional[str] = None
    singleton: bool = False
    parameters: Dict[Union[int, str], Any] = Field(default_factory=dict)
    enforce: List[str] = Field(default_factory=list)

    @field_validator("parameters", mode="before")
    @classmethod
    def _positional_keys(cls, value: Any) -> Any:
        # JSON and YAML object keys arrive as strings; digits address positions
        if isinstance(value, dict):
            return {
                int(key) if isinstance(key, str) and key.isdigit() else key: item
                for key, item in value.items()
            }
        return value

    @model_validator(mode="after")
    def _single_target(self) -> "BindingConfig":
        if self.concrete and self.factory:
            raise ValueError(f"Binding for {self.interface} defines both concrete and factory")
        return self


class ContainerConfig(BaseModel):
    """Complete container configuration"""
    bindings: List[BindingConfig] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "ContainerConfig":
        """Create configuration from dictionary"""
        try:
            return cls.model_validate(config_dict or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid container configuration: {exc}") from exc

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ContainerConfig":
        """Load configuration from a JSON or YAML file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix == ".json":
            with open(config_path) as f:
                config_dict = json.load(f)
        elif config_path.suffix in (".yml", ".yaml"):
            with open(config_path) as f:
                config_dict = yaml.safe_load(f)
        else:
            raise ConfigurationError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict)

    @classmethod
    def from_environment(cls) -> "ContainerConfig":
        """Create configuration from environment variables"""
        config_path = os.getenv(CONFIG_ENV_VAR)
        config = cls.from_file(config_path) if config_path else cls()

        level = os.getenv(LOG_LEVEL_ENV_VAR)
        if level:
            try:
                config.logging.level = level
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid {LOG_LEVEL_ENV_VAR}: {exc}") from exc

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return self.model_dump()

    def apply(self, container: "Container") -> "Container":
        """Bind every configured service into the container"""
        for binding in self.bindings:
            if binding.factory:
                service = container.factory(binding.interface, locate(binding.factory))
            else:
                service = container.bind(binding.interface, binding.concrete)

            if binding.singleton:
                service.singleton()
            if binding.parameters:
                service.with_parameters(binding.parameters)
            if binding.enforce:
                service.enforce_parameters(*binding.enforce)

        logger.info(f"Applied {len(self.bindings)} configured bindings")
        return container


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Set up the servicebox logger.

    Replaces a handler installed by a previous call instead of stacking them.
    """
    package_logger = logging.getLogger("servicebox")
    package_logger.setLevel(config.level)

    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
            handler.close()

    if config.file_path:
        handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count
        )
    else:
        handler = logging.StreamHandler()

    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(config.format))
    package_logger.addHandler(handler)

    return package_logger


__all__ = [
    "ContainerConfig", "BindingConfig", "LoggingConfig",
    "configure_logging", "CONFIG_ENV_VAR", "LOG_LEVEL_ENV_VAR"
]
