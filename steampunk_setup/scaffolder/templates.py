"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads templates from the
``steampunk_setup/scaffolder/templates/`` directory. Templates are used in one
of two ways:

* *expanding* -- rendered through Jinja2 so ``{{ app_name }}``-style
  placeholders are replaced with configuration values;
* *literal* -- read back byte-for-byte, because the file (JSX, TypeScript)
  contains brace syntax that belongs to the consuming tool.

Placeholders with no matching context value are passed through verbatim
(``{{ name }}`` stays ``{{ name }}``) and reported so the caller can warn.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import DebugUndefined, Environment, FileSystemLoader, meta

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders scaffolding templates with a flat context dictionary."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=DebugUndefined,
            keep_trailing_newline=True,
        )

    # -- Expanding ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"vite.config.ts.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def unresolved_placeholders(self, template_path: str, context: dict[str, Any]) -> list[str]:
        """Return placeholder names used by *template_path* but absent from *context*."""
        ast = self.env.parse(self.load_literal(template_path))
        return sorted(meta.find_undeclared_variables(ast) - set(context))

    # -- Literal -----------------------------------------------------------

    def load_literal(self, template_path: str) -> str:
        """Return the raw template body without any substitution."""
        source, _, _ = self.env.loader.get_source(self.env, template_path)
        return source

    # -- File output -------------------------------------------------------

    async def write_file(self, output_path: str | Path, content: str) -> Path:
        """Write *content* to *output_path*, creating parent directories.

        Always overwrites. Newlines are written as ``\\n`` on every platform so
        identical input yields byte-identical files.
        """
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(content)
