"""Layered configuration: packaged defaults, a user YAML file, the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .logging_utils import StructuredLogWriter
from .runner import ZellijRunner

CONFIG_PACKAGE = "zellij_mcp.config"
DEFAULTS_RESOURCE = "defaults.yaml"
PACKAGE_DIR = Path(__file__).resolve().parent

SESSION_ENV = "ZELLIJ_MCP_SESSION"
CONFIG_ENV = "ZELLIJ_MCP_CONFIG"


@dataclass(slots=True)
class Settings:
    binary: Path
    session: str
    timeout: float
    post_action_delay: float
    log_path: Optional[Path] = None
    log_max_bytes: int = 5_000_000


def _read_yaml(handle: Any) -> Dict[str, Any]:
    data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("settings file must contain a mapping")
    return data


def load_defaults() -> Dict[str, Any]:
    with resources.files(CONFIG_PACKAGE).joinpath(DEFAULTS_RESOURCE).open(
        "r", encoding="utf-8"
    ) as fh:
        return _read_yaml(fh)


def load_settings(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Build :class:`Settings` from every configuration layer.

    *path* wins over ``ZELLIJ_MCP_CONFIG``; a missing file is skipped.
    ``ZELLIJ_MCP_SESSION`` overrides whatever session the files name. The
    environment is only read here so the runner never looks at it itself.
    """

    env = os.environ if environ is None else environ
    data = load_defaults()

    if path is None and env.get(CONFIG_ENV):
        path = Path(env[CONFIG_ENV])
    if path is not None:
        path = path.expanduser()
        if path.exists():
            with path.open("r", encoding="utf-8") as fh:
                data.update(_read_yaml(fh))

    if env.get(SESSION_ENV):
        data["session"] = env[SESSION_ENV]

    binary = Path(str(data["binary"])).expanduser()
    if not binary.is_absolute():
        binary = PACKAGE_DIR / binary
    log_path = data.get("log_path")
    return Settings(
        binary=binary,
        session=str(data["session"]),
        timeout=float(data["timeout"]),
        post_action_delay=float(data["post_action_delay"]),
        log_path=Path(log_path).expanduser() if log_path else None,
        log_max_bytes=int(data.get("log_max_bytes", 5_000_000)),
    )


def build_runner(settings: Settings) -> ZellijRunner:
    log_writer = None
    if settings.log_path is not None:
        log_writer = StructuredLogWriter(
            settings.log_path, max_bytes=settings.log_max_bytes
        )
    return ZellijRunner(
        binary=settings.binary,
        session=settings.session,
        timeout=settings.timeout,
        post_action_delay=settings.post_action_delay,
        log_writer=log_writer,
    )


__all__ = ["Settings", "build_runner", "load_defaults", "load_settings"]
