from __future__ import annotations

from pathlib import Path

from projectdesk import config


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains projectdesk/, config/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def config_dir() -> Path:
    """Directory holding shipped YAML configuration."""
    return project_root() / "config"


def thresholds_path() -> Path:
    """
    Attention threshold file.

    Resolution order:
    1. PROJECTDESK_THRESHOLDS_FILE env var (explicit override)
    2. <project root>/config/attention_thresholds.yaml (default)
    """
    if config.THRESHOLDS_FILE:
        return Path(config.THRESHOLDS_FILE).expanduser().resolve()
    return config_dir() / "attention_thresholds.yaml"
