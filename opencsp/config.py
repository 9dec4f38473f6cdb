"""
Configuration module for OpenCSP.

This module holds the solver budgets, numerical tolerances and logging
preferences shared by the library and the command line.

Configuration can be set via:
1. Environment variables (OPENCSP_*)
2. Config file (./opencsp.toml or ~/.opencsp/config.toml)
3. Programmatic API

Example:
    >>> from opencsp.config import config
    >>> config.max_time
    600.0
    >>> config.master_time_limit = 5.0
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back to default."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {value!r}")


def _default_tolerances() -> dict[str, float]:
    return {
        "reduced_cost": 1e-6,
        "primal": 1e-9,
        "feasibility": 1e-6,
    }


@dataclass
class CSPConfig:
    """
    Configuration for the OpenCSP library.

    Attributes:
        max_time: Global wall-clock budget for the column generation loop (s)
        master_time_limit: Per-solve budget for the restricted master LP (s)
        pricing_time_limit: Per-solve budget for the knapsack pricing (s)
        max_iterations: Safety bound on loop rounds (0 = unlimited)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        tolerances: Numerical tolerances for optimization
    """

    # Budgets
    max_time: float = field(default_factory=lambda: _env_float("OPENCSP_MAX_TIME", 600.0))
    master_time_limit: float = field(
        default_factory=lambda: _env_float("OPENCSP_MASTER_TIME_LIMIT", 10.0)
    )
    pricing_time_limit: float = field(
        default_factory=lambda: _env_float("OPENCSP_PRICING_TIME_LIMIT", 60.0)
    )
    max_iterations: int = 0

    # Logging
    log_level: str = field(default_factory=lambda: os.environ.get("OPENCSP_LOG_LEVEL", "INFO"))

    # Numerical tolerances
    tolerances: dict[str, float] = field(default_factory=_default_tolerances)

    def __post_init__(self):
        """Validate budgets and normalize the log level."""
        for name in ("max_time", "master_time_limit", "pricing_time_limit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")
        self.log_level = str(self.log_level).upper()
        merged = _default_tolerances()
        merged.update(self.tolerances)
        self.tolerances = merged

    # =========================================================================
    # Tolerance helpers
    # =========================================================================

    def get_tolerance(self, name: str) -> float:
        """Get a tolerance value by name."""
        return self.tolerances.get(name, 1e-6)

    def set_tolerance(self, name: str, value: float) -> None:
        """Set a tolerance value."""
        self.tolerances[name] = value

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_cg_config(self, **overrides: Any):
        """
        Build a CGConfig for the column generation loop.

        Args:
            **overrides: CGConfig fields to override

        Returns:
            CGConfig populated from this configuration
        """
        from opencsp.solver.column_generation import CGConfig

        values = {
            "max_time": self.max_time,
            "master_time_limit": self.master_time_limit,
            "pricing_time_limit": self.pricing_time_limit,
            "max_iterations": self.max_iterations,
            "optimality_tolerance": self.get_tolerance("reduced_cost"),
            "primal_tolerance": self.get_tolerance("primal"),
        }
        values.update(overrides)
        return CGConfig(**values)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "max_time": self.max_time,
            "master_time_limit": self.master_time_limit,
            "pricing_time_limit": self.pricing_time_limit,
            "max_iterations": self.max_iterations,
            "log_level": self.log_level,
            "tolerances": self.tolerances.copy(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> 'CSPConfig':
        """Create config from dictionary. Missing keys keep their defaults."""
        kwargs: dict[str, Any] = {}
        for key in ("max_time", "master_time_limit", "pricing_time_limit"):
            if key in d:
                kwargs[key] = float(d[key])
        if "max_iterations" in d:
            kwargs["max_iterations"] = int(d["max_iterations"])
        if "log_level" in d:
            kwargs["log_level"] = str(d["log_level"])
        if d.get("tolerances"):
            kwargs["tolerances"] = {k: float(v) for k, v in d["tolerances"].items()}
        return cls(**kwargs)

    def save(self, path: Optional[Path] = None) -> None:
        """
        Save configuration to a TOML file.

        Args:
            path: Path to save to (default: ./opencsp.toml)
        """
        if path is None:
            path = Path("opencsp.toml")

        lines = [
            "# OpenCSP Configuration",
            "",
            "[budgets]",
            f"max_time = {self.max_time}",
            f"master_time_limit = {self.master_time_limit}",
            f"pricing_time_limit = {self.pricing_time_limit}",
            f"max_iterations = {self.max_iterations}",
            "",
            "[general]",
            f'log_level = "{self.log_level}"',
            "",
            "[tolerances]",
        ]
        for name, value in self.tolerances.items():
            lines.append(f"{name} = {value}")

        Path(path).write_text("\n".join(lines) + "\n")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'CSPConfig':
        """
        Load configuration from a TOML file.

        Args:
            path: Path to load from (default: ./opencsp.toml or ~/.opencsp/config.toml)

        Returns:
            Loaded configuration (or default if file not found)
        """
        if path is None:
            local_config = Path("opencsp.toml")
            user_config = Path.home() / ".opencsp" / "config.toml"

            if local_config.exists():
                path = local_config
            elif user_config.exists():
                path = user_config
            else:
                return cls()

        path = Path(path)
        if not path.exists():
            return cls()

        # Flat TOML subset: [section] headers and key = value lines
        config_dict: dict[str, Any] = {"tolerances": {}}
        current_section = None

        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("[") and line.endswith("]"):
                current_section = line[1:-1]
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"')

                if current_section == "tolerances":
                    config_dict["tolerances"][key] = float(value)
                else:
                    config_dict[key] = value

        return cls.from_dict(config_dict)


# Global configuration instance
config = CSPConfig()


def get_config() -> CSPConfig:
    """Get the global configuration."""
    return config


def set_config(new_config: CSPConfig) -> None:
    """
    Replace the global configuration.

    Args:
        new_config: Configuration to install
    """
    global config
    config = new_config
