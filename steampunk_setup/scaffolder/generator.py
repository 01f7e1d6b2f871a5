"""Template emission into a generated project.

Takes a ``RunConfiguration`` and writes every file of the manifest into the
project root, substituting placeholders in expanding templates and copying
literal templates untouched. Every write is an unconditional overwrite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from steampunk_setup.config import RunConfiguration
from steampunk_setup.errors import SetupError
from steampunk_setup.utils import console, print_warning

from .manifest import STORYBOOK_FILES, TemplateFile, build_manifest
from .markup import patch_index_file
from .templates import TemplateRenderer


class ProjectGenerator:
    """Emits the steampunk template manifest into a Vite project.

    Attributes:
        config: The run configuration supplying placeholder values.
        renderer: Template loader/renderer.
        unresolved: Placeholders that had no configuration value, keyed by
            target path. They are written through verbatim.
    """

    def __init__(
        self,
        config: RunConfiguration,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.unresolved: dict[str, list[str]] = {}

    @property
    def manifest(self) -> list[TemplateFile]:
        return build_manifest(include_trivia=self.config.include_trivia)

    def _build_context(self) -> dict[str, Any]:
        return self.config.template_context()

    # -- Public API --------------------------------------------------------

    def render(self, entry: TemplateFile) -> str:
        """Return the final body of *entry* for this configuration."""
        if not entry.expanding:
            return self.renderer.load_literal(entry.source)

        context = self._build_context()
        missing = self.renderer.unresolved_placeholders(entry.source, context)
        if missing:
            self.unresolved[entry.target] = missing
            print_warning(
                f"  {entry.target}: no value for {', '.join(missing)}; left as-is"
            )
        return self.renderer.render(entry.source, context)

    async def emit(self, project_root: Path, entry: TemplateFile) -> Path:
        """Write a single manifest entry below *project_root*."""
        target = resolve_target(project_root, entry.target)
        path = await self.renderer.write_file(target, self.render(entry))
        console.print(f"  [green]+[/green] {entry.target} [dim]({entry.mode.value})[/dim]")
        return path

    async def emit_all(self, project_root: str | Path) -> list[Path]:
        """Emit every manifest entry in order and return the written paths."""
        root = Path(project_root)
        return [await self.emit(root, entry) for entry in self.manifest]

    async def write_storybook_config(self, project_root: str | Path) -> list[Path]:
        """Overwrite the Storybook main and preview configs.

        ``main.ts`` resets Vite's ``base`` to ``/`` so the app's Pages prefix does
        not leak into Storybook; ``preview.ts`` loads the project stylesheets.
        """
        root = Path(project_root)
        return [await self.emit(root, entry) for entry in STORYBOOK_FILES]

    def patch_markup(self, project_root: str | Path) -> Path:
        """Apply fonts, title and dark mode to the project's ``index.html``."""
        path = patch_index_file(
            Path(project_root) / "index.html",
            self.config.app_name,
            self.config.theme.fonts(),
        )
        console.print("  [green]+[/green] index.html [dim](patched)[/dim]")
        return path


def resolve_target(project_root: Path, relative: str) -> Path:
    """Resolve *relative* below *project_root*, refusing paths that escape it."""
    root = project_root.resolve()
    target = (root / relative).resolve()
    if target != root and root not in target.parents:
        raise SetupError(f"Template target {relative!r} escapes the project root {root}")
    return target
