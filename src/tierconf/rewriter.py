"""Apply a resolved tier record to an installed framework.

Rewrites the ``model:`` line in each agent document's YAML frontmatter and
the ``agent.<name>.model`` entries of the host settings file.
"""

from __future__ import annotations

import json
import logging
import pathlib
import re

import tierconf.resolver.catalog
import tierconf.resolver.config
import tierconf.settings

logger = logging.getLogger("tierconf.rewriter")

_FRONTMATTER_RE = re.compile(r"\A(---\r?\n)(.*?)(\r?\n---)", re.DOTALL)
_MODEL_LINE_RE = re.compile(r"^model:[^\r\n]*", re.MULTILINE)


def agents_dir(project_dir: pathlib.Path) -> pathlib.Path:
    cfg = tierconf.resolver.config.load(project_dir)
    return project_dir / cfg.state_dir / "agents"


def replace_frontmatter_model(content: str, model: str) -> str:
    """Return *content* with its frontmatter ``model:`` value set to *model*.

    Documents without frontmatter, or without a ``model:`` key in it, come
    back unchanged.
    """
    front = _FRONTMATTER_RE.match(content)
    if front is None:
        return content
    body, count = _MODEL_LINE_RE.subn(
        lambda m: f"model: {model}", front.group(2), count=1
    )
    if not count:
        return content
    return content[: front.start(2)] + body + content[front.end(2) :]


def _rewrite_agent_docs(
    directory: pathlib.Path,
    resolved: tierconf.resolver.catalog.ResolvedConfig,
) -> bool:
    modified = False
    for name, tier in tierconf.resolver.catalog.AGENT_TIER_MAP.items():
        path = directory / f"{name}.md"
        if not path.is_file():
            continue
        try:
            original = path.read_bytes().decode("utf-8")
        except (ValueError, OSError) as exc:
            logger.warning("skipping %s, could not be read: %s", path, exc)
            continue
        updated = replace_frontmatter_model(original, resolved.for_tier(tier))
        if updated != original:
            path.write_bytes(updated.encode("utf-8"))
            logger.debug("%s -> %s", path.name, resolved.for_tier(tier))
            modified = True
    return modified


def _rewrite_settings(
    path: pathlib.Path,
    resolved: tierconf.resolver.catalog.ResolvedConfig,
) -> bool:
    if not path.exists():
        return False
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, RecursionError, OSError) as exc:
        logger.warning("skipping %s, could not be parsed: %s", path, exc)
        return False

    agents = data.get("agent") if isinstance(data, dict) else None
    if not isinstance(agents, dict):
        return False

    modified = False
    for name, tier in tierconf.resolver.catalog.AGENT_TIER_MAP.items():
        entry = agents.get(name)
        if not isinstance(entry, dict):
            continue
        model = resolved.for_tier(tier)
        if entry.get("model") != model:
            entry["model"] = model
            modified = True

    if modified:
        tierconf.settings.write_settings(path, data)
    return modified


def rewrite_agent_models(
    project_dir: pathlib.Path,
    resolved: tierconf.resolver.catalog.ResolvedConfig,
) -> bool:
    """Point every installed agent at its tier's model.

    Returns ``False`` without touching anything when the framework is not
    installed (no agents directory), otherwise whether any file changed.
    """
    directory = agents_dir(project_dir)
    if not directory.is_dir():
        return False

    docs_changed = _rewrite_agent_docs(directory, resolved)
    settings_changed = _rewrite_settings(
        tierconf.settings.settings_path(project_dir), resolved
    )
    return docs_changed or settings_changed
