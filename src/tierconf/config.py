"""Section registry backed by layered TOML files.

A section is a dataclass registered with ``@configurable("name")``; its
field defaults are the base layer.  ``load()`` overlays the ``[name]``
table of each file below, later files winning per key:

    ~/.config/tierconf/config.toml     user-wide
    <project>/.tierconf/config.toml    project

Files are edited by hand.  A missing or unreadable file is an empty layer.
"""

from __future__ import annotations

import dataclasses
import pathlib
import tomllib
from typing import Any, TypeVar

T = TypeVar("T")

_REGISTRY: dict[str, type] = {}

# Directories that mark the top of a project.
_ROOT_MARKERS = (".git", ".opencode")


def configurable(section: str):
    """Class decorator that registers a dataclass under *section*."""

    def decorator(cls: type[T]) -> type[T]:
        _REGISTRY[section] = cls
        return cls

    return decorator


def _global_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "tierconf" / "config.toml"


def _local_path(root: pathlib.Path) -> pathlib.Path:
    return root / ".tierconf" / "config.toml"


def find_project_root(cwd: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *cwd* to the first directory holding ``.git`` or ``.opencode``."""
    current = cwd.resolve()
    for candidate in (current, *current.parents):
        if any((candidate / marker).is_dir() for marker in _ROOT_MARKERS):
            return candidate
    return None


def _read_table(path: pathlib.Path, section: str) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        table = tomllib.loads(path.read_text(encoding="utf-8")).get(section)
    except (ValueError, OSError):
        # TOMLDecodeError and UnicodeDecodeError are both ValueErrors
        return {}
    return table if isinstance(table, dict) else {}


def load(section: str, root: pathlib.Path | None = None) -> Any:
    """Build the *section* dataclass from defaults, then user, then project TOML.

    *root* defaults to the project enclosing the working directory, or the
    working directory itself.  Keys that are not fields of the section are
    ignored.
    """
    cls = _REGISTRY.get(section)
    if cls is None:
        raise KeyError(f"Unknown config section: {section}")
    if root is None:
        root = find_project_root(pathlib.Path.cwd()) or pathlib.Path.cwd()

    fields = {f.name for f in dataclasses.fields(cls)}
    values: dict[str, Any] = {}
    for path in (_global_path(), _local_path(root)):
        values.update(
            (k, v) for k, v in _read_table(path, section).items() if k in fields
        )
    return cls(**values)
