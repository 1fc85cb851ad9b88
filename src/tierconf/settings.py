"""Host settings file (``opencode.json``) handling.

The framework's own settings are the merge base and whatever the user
already has on disk is the override, so user values are never clobbered
while missing framework keys get filled in.
"""

from __future__ import annotations

import json
import logging
import pathlib
from collections.abc import Mapping
from typing import Any

import tierconf.merge
import tierconf.resolver.catalog
import tierconf.resolver.config

logger = logging.getLogger("tierconf.settings")

CONTEXT7_COMMAND = ["npx", "-y", "@upstash/context7-mcp@latest"]


def settings_path(project_dir: pathlib.Path) -> pathlib.Path:
    cfg = tierconf.resolver.config.load(project_dir)
    return project_dir / cfg.settings_filename


def framework_settings(
    resolved: tierconf.resolver.catalog.ResolvedConfig | None = None,
) -> dict[str, Any]:
    """Build the settings tree the framework registers with the host.

    With *resolved*, every framework agent also gets its tier's model.
    """
    tree: dict[str, Any] = {
        "mcp": {
            # Live library docs for every agent.
            "context7": {
                "type": "local",
                "command": list(CONTEXT7_COMMAND),
            },
        },
    }
    if resolved is not None:
        tree["agent"] = {
            name: {"model": resolved.for_tier(tier)}
            for name, tier in tierconf.resolver.catalog.AGENT_TIER_MAP.items()
        }
    return tree


def read_settings(path: pathlib.Path) -> dict[str, Any]:
    """Load a JSON object from *path*.

    A missing file is an empty tree.  So is an unreadable or malformed one,
    with a warning, since it is about to be overwritten.
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, RecursionError, OSError) as exc:
        logger.warning("existing %s could not be parsed, overwriting: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("existing %s is not a JSON object, overwriting", path)
        return {}
    return data


def write_settings(path: pathlib.Path, tree: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(tree, indent=2) + "\n", encoding="utf-8")


def patch_settings(
    project_dir: pathlib.Path,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge *defaults* into the project's host settings file and save it.

    Returns the merged tree as written.
    """
    if defaults is None:
        defaults = framework_settings()
    path = settings_path(project_dir)
    existing = read_settings(path)
    merged = tierconf.merge.deep_merge(defaults, existing)
    write_settings(path, merged)
    logger.debug("patched %s (%d top-level keys)", path, len(merged))
    return merged
