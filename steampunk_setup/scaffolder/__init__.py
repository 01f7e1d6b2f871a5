"""steampunk-setup scaffolder -- emits the themed template manifest.

Quick usage::

    from steampunk_setup.config import load_config
    from steampunk_setup.scaffolder import ProjectGenerator

    generator = ProjectGenerator(load_config(".env"))
    written = await generator.emit_all("./goggles-app")
    generator.patch_markup("./goggles-app")
"""

from steampunk_setup.scaffolder.generator import ProjectGenerator, resolve_target
from steampunk_setup.scaffolder.manifest import (
    TemplateFile,
    TemplateMode,
    build_manifest,
)
from steampunk_setup.scaffolder.markup import patch_index_file, patch_index_html
from steampunk_setup.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectGenerator",
    "TemplateFile",
    "TemplateMode",
    "TemplateRenderer",
    "build_manifest",
    "patch_index_file",
    "patch_index_html",
    "resolve_target",
]
