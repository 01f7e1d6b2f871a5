"""The fixed manifest of files emitted into a generated project."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TemplateMode(str, Enum):
    EXPANDING = "expanding"
    LITERAL = "literal"


@dataclass(frozen=True)
class TemplateFile:
    """One file to emit.

    ``target`` is relative to the generated project root; ``source`` is
    relative to the template directory.
    """

    target: str
    source: str
    mode: TemplateMode

    @property
    def expanding(self) -> bool:
        return self.mode is TemplateMode.EXPANDING


_E = TemplateMode.EXPANDING
_L = TemplateMode.LITERAL

# Placeholder notes files, build configuration, stylesheets and the root
# component, in emission order.
BASE_FILES: tuple[TemplateFile, ...] = (
    TemplateFile("scaffolding.sh", "blank", _L),
    TemplateFile("components.txt", "blank", _L),
    TemplateFile("postcss.config.cjs", "postcss.config.cjs", _L),
    TemplateFile("src/tailwind.css", "src/tailwind.css", _L),
    TemplateFile("vite.config.ts", "vite.config.ts.j2", _E),
    TemplateFile("tailwind.config.js", "tailwind.config.js.j2", _E),
    TemplateFile("src/index.css", "src/index.css.j2", _E),
    TemplateFile("src/App.tsx", "src/App.tsx", _L),
)

COMPONENTS: tuple[str, ...] = (
    "Button",
    "Card",
    "Header",
    "Link",
    "NavList",
    "UnorderedList",
)

TRIVIA_COMPONENTS: tuple[str, ...] = ("ScoreDisplay", "TriviaCard")

PREVIEW_CONFIG = TemplateFile(".storybook/preview.ts", "storybook/preview.ts", _L)
MAIN_CONFIG = TemplateFile(".storybook/main.ts", "storybook/main.ts", _L)

# Written over what the Storybook initializer generates.
STORYBOOK_FILES: tuple[TemplateFile, ...] = (MAIN_CONFIG, PREVIEW_CONFIG)


def component_files(name: str) -> tuple[TemplateFile, TemplateFile]:
    """The component module and its companion story."""
    return (
        TemplateFile(f"src/components/{name}.tsx", f"src/components/{name}.tsx", _L),
        TemplateFile(
            f"src/components/{name}.stories.tsx", f"src/components/{name}.stories.tsx", _L
        ),
    )


def build_manifest(include_trivia: bool = False) -> list[TemplateFile]:
    """Return the ordered list of files to emit for a project."""
    manifest = list(BASE_FILES)
    names = COMPONENTS + (TRIVIA_COMPONENTS if include_trivia else ())
    for name in names:
        manifest.extend(component_files(name))
    return manifest
