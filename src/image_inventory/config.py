"""Configuration models with Pydantic validation."""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMEOUT = 600.0

VALID_PLATFORM_PREFIXES = ("linux/", "windows/", "darwin/")


def _validate_platform(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.startswith(VALID_PLATFORM_PREFIXES):
        raise ValueError(
            f"Platform '{v}' should start with one of {VALID_PLATFORM_PREFIXES}"
        )
    return v


class DockerOption(BaseModel):
    """Options for a single Docker extraction."""

    timeout: Optional[float] = Field(
        default=None, gt=0, description="Extraction time budget in seconds"
    )
    platform: Optional[str] = Field(
        default=None, description="Platform to pull, e.g. linux/amd64"
    )
    docker_binary: str = Field(default="docker", description="Docker CLI to invoke")

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: Optional[str]) -> Optional[str]:
        return _validate_platform(v)


class AnalyzerSettings(BaseModel):
    """Global analysis settings."""

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Time budget in seconds for extraction by image reference",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    platform: Optional[str] = Field(
        default=None, description="Platform to pull, e.g. linux/amd64"
    )
    docker_binary: str = Field(default="docker", description="Docker CLI to invoke")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: Optional[str]) -> Optional[str]:
        return _validate_platform(v)

    @classmethod
    def from_json(cls, config_path: Union[str, Path]) -> "AnalyzerSettings":
        """Load settings from a JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        return cls.model_validate(data)

    def docker_option(self) -> DockerOption:
        """Build Docker options for extraction by image reference."""
        return DockerOption(
            timeout=self.timeout,
            platform=self.platform,
            docker_binary=self.docker_binary,
        )
