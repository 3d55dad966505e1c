from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
import os
import tomllib
import warnings

# Inferred ordinal position domains larger than this are rejected.
IMPLICIT_ORDINAL_DOMAIN_LIMIT = 10_000

SYMBOLS = ("circle", "cross", "diamond", "square", "star", "triangle", "wye")


def _get_config_paths() -> list[Path]:
    """Returns list of paths to check for config files, in order of priority."""
    paths: list[Path] = []

    # 1. Current directory
    paths.append(Path.cwd() / ".plotscalerc.toml")

    # 2. Home directory
    home = Path.home()
    paths.append(home / ".plotscalerc.toml")

    # 3. XDG config directory
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", str(home / ".config")))
    paths.append(Path(xdg_config) / "plotscale" / "config.toml")

    return paths


def _load_config_file() -> dict[str, object] | None:
    """Load config from file if it exists."""
    for path in _get_config_paths():
        if path.exists():
            try:
                with open(path, "rb") as f:
                    return tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                warnings.warn(f"Failed to load config from {path}: {e}")
    return None


def _parse_config_value(key: str, value: object) -> object:
    """Convert config file values to proper types."""
    # Handle pixel values (strings like "640px")
    if isinstance(value, str) and value.endswith("px"):
        return float(value[:-2])

    # Scheme names are case-insensitive
    if key.endswith("_scheme") and isinstance(value, str):
        return value.lower()

    if key == "symbols" and isinstance(value, list):
        return tuple(str(v) for v in value)

    if key == "ordinal_domain_limit":
        return int(value)  # type: ignore[call-overload]

    return value


@dataclass
class Config:
    # Plot frame, in pixels. Per-plot width/height/margin options override these.
    width: float = 640.0
    height: float = 400.0
    margin_top: float = 20.0
    margin_right: float = 20.0
    margin_bottom: float = 20.0
    margin_left: float = 20.0

    # Default color schemes per scale family
    categorical_scheme: str = "tableau10"
    ordinal_scheme: str = "turbo"
    continuous_scheme: str = "turbo"
    diverging_scheme: str = "rdbu"
    threshold_scheme: str = "rdylbu"
    cyclical_scheme: str = "rainbow"

    # Binned scales
    quantile_n: int = 5
    quantize_n: int = 5

    # Band and point scales
    band_padding: float = 0.1
    facet_padding_outer: float = 0.0
    point_padding: float = 0.5

    # Encoding ranges
    radius: float = 3.0
    radius_max: float = 30.0
    length: float = 12.0
    length_max: float = 60.0
    symbols: tuple[str, ...] = field(default_factory=lambda: SYMBOLS)

    ordinal_domain_limit: int = IMPLICIT_ORDINAL_DOMAIN_LIMIT

    @staticmethod
    def load(path: Optional[Path | str] = None) -> "Config":
        """
        Load config from a file. If no path is provided, searches standard locations.
        """
        if path is not None:
            # Load from specific file
            path = Path(path)
            if not path.exists():
                # File doesn't exist, return defaults
                return Config()
            with open(path, "rb") as f:
                config_data = tomllib.load(f)
        else:
            # Load from standard locations
            config_data = _load_config_file()
            if config_data is None:
                # No config file found, return defaults
                return Config()

        config = Config()
        for key, value in config_data.items():
            if hasattr(config, key):
                parsed_value = _parse_config_value(key, value)
                setattr(config, key, parsed_value)

        return config


# Global default config loaded from file
_default_config: Optional[Config] = None


def default_config() -> Config:
    """
    Returns the default config, loading from file if not already loaded.
    This is cached so the file is only read once per session.
    """
    global _default_config
    if _default_config is None:
        _default_config = Config.load()
    return _default_config
