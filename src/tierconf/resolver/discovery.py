"""Model discovery from the output of the host's ``models`` command.

Parsing is lenient: JSON first, then a line scan that keeps at most one
identifier per line.  Nothing here raises; an unusable source yields an
empty list and callers fall back on their own defaults.
"""

from __future__ import annotations

import json
import logging
import pathlib
import re
import shlex
import subprocess
from typing import Any

import tierconf.resolver.config

logger = logging.getLogger("tierconf.resolver.discovery")

_ID_KEYS = ("id", "name", "model")
_LIST_KEYS = ("models", "data", "items")

_PROVIDER_RE = re.compile(r"\b([\w.-]+/[\w.-]+)\b", re.ASCII)
_FAMILY_RE = re.compile(
    r"\b((?:claude|gpt|gemini|grok|haiku|sonnet|opus)-[\w.-]+)\b",
    re.IGNORECASE | re.ASCII,
)
_BARE_RE = re.compile(r"^[\w./-]+$", re.ASCII)
_LINE_BREAK_RE = re.compile(r"\r?\n")
_MIN_BARE_LENGTH = 4
_MAX_BARE_LENGTH = 79

_SKIP_PREFIXES = ("#", "─", "━", "═")
_RULE_CHARS = frozenset("-=_*+| ")


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _item_to_id(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in _ID_KEYS:
            value = item.get(key)
            if value is not None:
                return str(value)
    return ""


def _from_json(raw: str) -> list[str]:
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        return []

    items: Any = None
    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict):
        for key in _LIST_KEYS:
            if parsed.get(key) is not None:
                items = parsed[key]
                break

    if not isinstance(items, list):
        return []
    return [ident for ident in map(_item_to_id, items) if ident]


def _is_decoration(line: str) -> bool:
    return line.startswith(_SKIP_PREFIXES) or set(line) <= _RULE_CHARS


def _from_line(line: str) -> str | None:
    match = _PROVIDER_RE.search(line)
    if match:
        return match.group(1)
    match = _FAMILY_RE.search(line)
    if match:
        return match.group(1)
    if _BARE_RE.match(line) and _MIN_BARE_LENGTH <= len(line) <= _MAX_BARE_LENGTH:
        return line
    return None


def _from_lines(raw: str) -> list[str]:
    found: list[str] = []
    for line in _LINE_BREAK_RE.split(raw):
        trimmed = line.strip()
        if not trimmed or _is_decoration(trimmed):
            continue
        ident = _from_line(trimmed)
        if ident:
            found.append(ident)
    return found


def extract_identifiers(raw: str | bytes | None) -> list[str]:
    """Extract model identifiers from free-form command output.

    Accepted JSON shapes: a list of strings, a list of objects reduced to
    their ``id``/``name``/``model`` field, or an object carrying such a list
    under ``models``/``data``/``items``.  Anything else is scanned line by
    line for a ``provider/name`` token, a known model-family token, or a
    bare identifier-looking line.  Order is first-seen, duplicates dropped.
    """
    if not raw:
        return []
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    text = raw.strip()
    if not text:
        return []

    found = _from_json(text)
    if not found:
        found = _from_lines(text)
    return _dedupe(found)


def discover_models(
    command: str | None = None,
    timeout: float | None = None,
    *,
    root: pathlib.Path | None = None,
) -> list[str]:
    """Run the discovery command and return the identifiers it lists.

    Returns an empty list when the command is missing, fails, times out or
    prints nothing usable.
    """
    cfg = tierconf.resolver.config.load(root)
    if command is None:
        command = cfg.discovery_command
    if timeout is None:
        timeout = cfg.discovery_timeout

    try:
        argv = shlex.split(command)
    except ValueError as exc:
        logger.warning("invalid discovery command %r: %s", command, exc)
        return []
    if not argv:
        return []

    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.debug("discovery command not found: %s", argv[0])
        return []
    except subprocess.TimeoutExpired:
        logger.warning("discovery command timed out after %ss: %s", timeout, command)
        return []
    except (subprocess.SubprocessError, OSError, ValueError) as exc:
        logger.warning("discovery command failed: %s", exc)
        return []

    if result.returncode != 0:
        logger.debug(
            "discovery command exited %d: %s",
            result.returncode,
            (result.stderr or "").strip(),
        )
        return []

    models = extract_identifiers(result.stdout)
    logger.debug("discovered %d model(s)", len(models))
    return models
