"""One-shot configuration of a project: resolve, persist, patch, apply."""

from __future__ import annotations

import dataclasses
import logging
import pathlib
from collections.abc import Callable

import tierconf.resolver.catalog
import tierconf.resolver.store
import tierconf.rewriter
import tierconf.settings

logger = logging.getLogger("tierconf.project")


@dataclasses.dataclass
class ConfigureResult:
    resolved: tierconf.resolver.catalog.ResolvedConfig
    record_path: pathlib.Path | None = None
    settings: dict = dataclasses.field(default_factory=dict)
    agents_updated: bool = False


def configure_project(
    project_dir: pathlib.Path,
    *,
    discover: Callable[[], list[str]] | None = None,
    use_defaults: bool = False,
    save: bool = True,
) -> ConfigureResult:
    """Resolve tier models for *project_dir* and wire them into its files.

    Steps, in order: resolve (saved record, then discovery), save the record
    unless *save* is false, merge the framework settings into the host
    settings file, and point installed agents at their tier's model.

    Raises :class:`tierconf.resolver.store.ModelsUnavailableError` when
    nothing can be resolved and *use_defaults* is false.
    """
    resolved = tierconf.resolver.store.resolve_models(
        project_dir, discover=discover, use_defaults=use_defaults
    )
    logger.info(
        "resolved models: strong=%s medium=%s weak=%s",
        resolved.strong,
        resolved.medium,
        resolved.weak,
    )

    result = ConfigureResult(resolved=resolved)
    if save:
        result.record_path = tierconf.resolver.store.save_resolved(project_dir, resolved)

    result.settings = tierconf.settings.patch_settings(
        project_dir, tierconf.settings.framework_settings(resolved)
    )
    result.agents_updated = tierconf.rewriter.rewrite_agent_models(project_dir, resolved)
    if result.agents_updated:
        # the rewrite may have changed agent models on disk
        result.settings = tierconf.settings.read_settings(
            tierconf.settings.settings_path(project_dir)
        )
    return result
