"""Application settings using Pydantic Settings.

This module defines the NetdriverSettings class which loads configuration
from environment variables and .env files using pydantic-settings. Nested
groups read the same `NETDRIVER_` prefix, e.g. `NETDRIVER_LEARNING_RATE`.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_MODEL_CONFIG = SettingsConfigDict(
    env_prefix="NETDRIVER_",
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path.cwd()


class PathSettings(BaseSettings):
    """Path-related settings."""

    model_config = _MODEL_CONFIG

    project_root: Path = Field(default_factory=_get_project_root)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def models_dir(self) -> Path:
        return self.project_root / "models"

    @property
    def tasks_dir(self) -> Path:
        return self.project_root / "tasks"


class DataSettings(BaseSettings):
    """Data loading settings."""

    model_config = _MODEL_CONFIG

    binarize_threshold: float = Field(
        default=30.0,
        description="Values strictly above it become 1 when a source is binarized",
    )


class ExecutionSettings(BaseSettings):
    """Failure policy of task executions."""

    model_config = _MODEL_CONFIG

    abort_on_unknown_action: bool = Field(
        default=False, description="Whether an unknown action stops the run"
    )
    abort_on_model_io_failure: bool = Field(
        default=True, description="Whether a failed save or load stops the run"
    )


class NetworkSettings(BaseSettings):
    """Defaults of the reference network built by the CLI."""

    model_config = _MODEL_CONFIG

    hidden_layers: list[int] = Field(
        default_factory=lambda: [100], description="Sizes of the pretrained RBM layers"
    )
    dense_layers: list[int] = Field(
        default_factory=list, description="Sizes of the dense layers under the output"
    )
    learning_rate: float = Field(default=0.05, gt=0, description="SGD learning rate")
    momentum: float = Field(default=0.9, ge=0, description="SGD momentum")
    batch_size: int = Field(default=10, gt=0, description="Mini-batch size")
    error_goal: float = Field(
        default=0.0, ge=0, description="Training error at which fine-tuning stops"
    )
    patience: int | None = Field(
        default=None, gt=0, description="Epochs without loss improvement before stopping"
    )
    random_state: int | None = Field(default=None, description="Seed of the network")


class LoggingSettings(BaseSettings):
    """Logging settings."""

    model_config = _MODEL_CONFIG

    log_level: str = Field(default="INFO", description="Minimum level of the stderr sink")
    log_serialize: bool = Field(default=False, description="Whether to log JSON records")


class NetdriverSettings(BaseSettings):
    """Root settings class that composes all settings groups."""

    model_config = _MODEL_CONFIG

    debug: bool = Field(default=False, description="Include diagnostics in tracebacks")

    paths: PathSettings = Field(default_factory=PathSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
