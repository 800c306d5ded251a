"""
CarGo Configuration Module

Handles all configuration settings for a session.
Supports environment variables, .env files, and programmatic configuration.

Configuration can be set via:
1. Environment variables (CARGO_STEP_DELAY, CARGO_MAZE_PATH, CARGO_TRACE_LIMIT, etc.)
2. .env file in the project root
3. Programmatic configuration via create_config()
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .scheduler.queue import DEFAULT_DELAY, MAX_DELAY, MIN_DELAY

# Load environment variables from .env file
load_dotenv()


@dataclass
class SchedulerConfig:
    """Configuration for the step queue."""

    # Delay between two executed commands (ms)
    step_delay: float = field(
        default_factory=lambda: float(os.getenv("CARGO_STEP_DELAY", str(DEFAULT_DELAY)))
    )

    # Bounds for faster()/slower() (ms)
    min_delay: float = MIN_DELAY
    max_delay: float = MAX_DELAY

    def validate(self) -> None:
        """
        Raises:
            ValueError: If the delay bounds are inconsistent
        """
        if not 0 < self.min_delay <= self.max_delay:
            raise ValueError(f"Invalid delay bounds: [{self.min_delay}, {self.max_delay}]")
        if not self.min_delay <= self.step_delay <= self.max_delay:
            raise ValueError(
                f"Step delay {self.step_delay} ms outside [{self.min_delay}, {self.max_delay}] ms. "
                "Check CARGO_STEP_DELAY."
            )


@dataclass
class CargoConfig:
    """
    Main configuration for a CarGo session.

    Example usage:
        # From environment variables
        config = CargoConfig()

        # Programmatic configuration
        config = create_config(step_delay=50, maze_path="data/mazes/corridor.json")
    """

    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    # Maze JSON file (None = built-in default maze)
    maze_path: Optional[str] = field(
        default_factory=lambda: os.getenv("CARGO_MAZE_PATH")
    )

    # Safety limit for headless runs of endless programs
    max_steps: int = field(
        default_factory=lambda: int(os.getenv("CARGO_MAX_STEPS", "10000"))
    )

    # Newest trace entries kept per session
    trace_limit: int = field(
        default_factory=lambda: int(os.getenv("CARGO_TRACE_LIMIT", "10000"))
    )

    # Logging settings
    log_level: str = field(
        default_factory=lambda: os.getenv("CARGO_LOG_LEVEL", "INFO")
    )
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("CARGO_LOG_FILE")
    )

    # Project paths
    project_root: Path = field(
        default_factory=lambda: Path(__file__).parent.parent
    )

    def validate(self) -> None:
        """Validate all configuration sections."""
        self.scheduler.validate()
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")
        if self.trace_limit <= 0:
            raise ValueError(f"trace_limit must be positive, got {self.trace_limit}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls) -> "CargoConfig":
        """Create configuration from environment variables."""
        return cls()

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "CargoConfig":
        """
        Create configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            CargoConfig instance
        """
        scheduler_cfg = config_dict.get("scheduler", {})

        return cls(
            scheduler=SchedulerConfig(
                step_delay=float(scheduler_cfg.get("step_delay", DEFAULT_DELAY)),
                min_delay=float(scheduler_cfg.get("min_delay", MIN_DELAY)),
                max_delay=float(scheduler_cfg.get("max_delay", MAX_DELAY)),
            ),
            maze_path=config_dict.get("maze_path"),
            max_steps=int(config_dict.get("max_steps", 10000)),
            trace_limit=int(config_dict.get("trace_limit", 10000)),
            log_level=config_dict.get("log_level", "INFO"),
            log_file=config_dict.get("log_file"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration to dictionary."""
        return {
            "scheduler": {
                "step_delay": self.scheduler.step_delay,
                "min_delay": self.scheduler.min_delay,
                "max_delay": self.scheduler.max_delay,
            },
            "maze_path": self.maze_path,
            "max_steps": self.max_steps,
            "trace_limit": self.trace_limit,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


def get_default_config() -> CargoConfig:
    """Get the default configuration from environment."""
    return CargoConfig.from_env()


def create_config(
    step_delay: Optional[float] = None,
    maze_path: Optional[str] = None,
    max_steps: Optional[int] = None,
    **kwargs
) -> CargoConfig:
    """
    Convenience function to create a configuration.

    Args:
        step_delay: Delay between executed commands (ms)
        maze_path: Maze JSON file
        max_steps: Step limit for headless runs
        **kwargs: trace_limit, log_level, log_file

    Returns:
        Configured CargoConfig
    """
    config = CargoConfig()

    if step_delay is not None:
        config.scheduler.step_delay = float(step_delay)
    if maze_path:
        config.maze_path = maze_path
    if max_steps is not None:
        config.max_steps = max_steps

    if "trace_limit" in kwargs:
        config.trace_limit = kwargs["trace_limit"]
    if "log_level" in kwargs:
        config.log_level = kwargs["log_level"]
    if "log_file" in kwargs:
        config.log_file = kwargs["log_file"]

    config.validate()
    return config


def configure_logging(config: CargoConfig) -> None:
    """Set up root logging from the configuration."""
    handlers = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
