"""Persisted tier record and the resolve procedure built on it.

The record lives at ``<project>/.opencode/juninho-config.json`` and holds
exactly three identifiers::

    {"strong": "...", "medium": "...", "weak": "..."}
"""

from __future__ import annotations

import json
import logging
import pathlib
from collections.abc import Callable

import tierconf.resolver.catalog
import tierconf.resolver.config
import tierconf.resolver.discovery
import tierconf.settings

logger = logging.getLogger("tierconf.resolver.store")

_UNAVAILABLE_MESSAGE = """\
Could not detect any available models.
  The discovery command failed or listed no models.

  Possible causes:
    - the 'opencode' CLI is not installed or not on PATH
    - no provider is configured in OpenCode

  Fixes:
    1. install and configure OpenCode (https://opencode.ai)
    2. write the tier record by hand, or resolve with use_defaults=True"""


class ModelsUnavailableError(RuntimeError):
    """No tier record is saved and discovery found no models."""


def config_path(project_dir: pathlib.Path) -> pathlib.Path:
    cfg = tierconf.resolver.config.load(project_dir)
    return project_dir / cfg.state_dir / cfg.config_filename


def load_resolved(
    project_dir: pathlib.Path,
) -> tierconf.resolver.catalog.ResolvedConfig | None:
    """Return the saved tier record, or ``None`` if absent or incomplete."""
    path = config_path(project_dir)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, RecursionError, OSError) as exc:
        logger.warning("ignoring unreadable tier record %s: %s", path, exc)
        return None

    if not isinstance(data, dict):
        return None
    if not all(isinstance(data.get(k), str) and data[k] for k in ("strong", "medium", "weak")):
        return None
    return tierconf.resolver.catalog.ResolvedConfig.from_dict(data)


def save_resolved(
    project_dir: pathlib.Path,
    resolved: tierconf.resolver.catalog.ResolvedConfig,
) -> pathlib.Path:
    """Write *resolved* to the tier record, creating the state dir."""
    path = config_path(project_dir)
    tierconf.settings.write_settings(path, resolved.to_dict())
    return path


def resolve_models(
    project_dir: pathlib.Path,
    *,
    discover: Callable[[], list[str]] | None = None,
    use_defaults: bool = False,
) -> tierconf.resolver.catalog.ResolvedConfig:
    """Resolve the identifier for every tier of *project_dir*.

    A saved record wins.  Otherwise discovered models go through
    ``select_best``.  With nothing discovered, returns ``DEFAULT_MODELS`` when
    *use_defaults* is set and raises :class:`ModelsUnavailableError`
    otherwise.  Nothing is saved.
    """
    saved = load_resolved(project_dir)
    if saved is not None:
        return saved

    if discover is None:
        available = tierconf.resolver.discovery.discover_models(root=project_dir)
    else:
        available = discover()

    if available:
        return tierconf.resolver.catalog.select_best(available)

    if use_defaults:
        logger.info("no models discovered, using default tier models")
        return tierconf.resolver.catalog.DEFAULT_MODELS
    raise ModelsUnavailableError(_UNAVAILABLE_MESSAGE)
