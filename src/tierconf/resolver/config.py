"""Configuration for model resolution and the files it touches."""

from __future__ import annotations

import dataclasses
import pathlib

import tierconf.config


@tierconf.config.configurable("resolver")
@dataclasses.dataclass
class ResolverConfig:
    # Discovery
    discovery_command: str = "opencode models"
    discovery_timeout: float = 15.0

    # Project layout, relative to the project directory
    state_dir: str = ".opencode"
    config_filename: str = "juninho-config.json"
    settings_filename: str = "opencode.json"


def load(root: pathlib.Path | None = None) -> ResolverConfig:
    """Return the effective ``resolver`` section for *root*."""
    return tierconf.config.load("resolver", root)
