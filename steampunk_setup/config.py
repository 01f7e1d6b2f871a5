"""Run configuration for steampunk-setup.

The run inputs (application name, GitHub owner, theme tokens) are read once
from a ``.env`` file and validated into an immutable ``RunConfiguration``.
Pipeline knobs that come from the command line live in ``PipelineOptions``.
All models use Pydantic v2 so invalid input is rejected at construction time.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from steampunk_setup.errors import ConfigInvalid, ConfigMissing

DEFAULT_ENV_FILE = ".env"
DEFAULT_LOG_FILE = "steampunk_setup.log"

_HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
_REPO_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_INLINE_COMMENT = re.compile(r"\s+#.*$")
_OWNER_NAME = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


# ---------------------------------------------------------------------------
# .env parsing
# ---------------------------------------------------------------------------


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file into a dict of key-value pairs.

    Supports ``KEY=VALUE``, ``KEY="VALUE"``, ``KEY='VALUE'``,
    ``export KEY=VALUE``, blank lines, ``#`` comments and, after an unquoted
    value, `` # trailing`` comments. No variable expansion.
    """
    result: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = _unquote(value.strip())
        if key:
            result[key] = value
    return result


def _unquote(value: str) -> str:
    if value[:1] in ('"', "'"):
        end = value.find(value[0], 1)
        if end != -1:
            return value[1:end]
        return value
    # Unquoted: whitespace then '#' starts a comment, as in a shell.
    return _INLINE_COMMENT.sub("", value)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ThemeConfig(BaseModel):
    """Color and font tokens templated into the generated project.

    The Tailwind utility names (``copper``, ``bronze``, ``gold``, ``ivory``,
    ``font-special``, ``font-arbutus``, ``font-cinzel``) stay fixed; only the
    values behind them are themable.
    """

    model_config = ConfigDict(frozen=True)

    primary_color: str = Field(default="#B87333", description="copper")
    primary_color_dark: str = Field(default="#A85C22")
    secondary_color: str = Field(default="#CD7F32", description="bronze")
    secondary_color_dark: str = Field(default="#A85C28")
    tertiary_color: str = Field(default="#D4AF37", description="gold")
    tertiary_color_dark: str = Field(default="#A67C27")
    ivory_color: str = Field(default="#FFFFF0")
    ivory_dark_color: str = Field(default="#ECECEC")
    primary_font: str = Field(default="Special Elite")
    secondary_font: str = Field(default="Arbutus Slab")
    tertiary_font: str = Field(default="Cinzel")

    @field_validator(
        "primary_color",
        "primary_color_dark",
        "secondary_color",
        "secondary_color_dark",
        "tertiary_color",
        "tertiary_color_dark",
        "ivory_color",
        "ivory_dark_color",
    )
    @classmethod
    def _check_hex(cls, value: str) -> str:
        value = value.strip()
        if not _HEX_COLOR.match(value):
            raise ValueError(f"expected a #RGB or #RRGGBB hex color, got {value!r}")
        return value.upper()

    @field_validator("primary_font", "secondary_font", "tertiary_font")
    @classmethod
    def _check_font(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("font family must not be empty")
        if any(ch in value for ch in "\"'<>;{}"):
            raise ValueError(f"font family contains forbidden characters: {value!r}")
        return value

    def fonts(self) -> list[str]:
        """Return the three font families in primary/secondary/tertiary order."""
        return [self.primary_font, self.secondary_font, self.tertiary_font]


class RunConfiguration(BaseModel):
    """Validated inputs for one pipeline execution. Immutable for the run."""

    model_config = ConfigDict(frozen=True)

    app_name: str
    github_account: str
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    include_trivia: bool = False
    repo_visibility: Literal["public", "private"] = "public"
    default_branch: str = "main"

    @field_validator("app_name")
    @classmethod
    def _check_app_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("APP_NAME must not be empty")
        if not _REPO_NAME.match(value):
            raise ValueError(
                f"APP_NAME {value!r} is not usable as a directory and repository name "
                "(letters, digits, '.', '_' and '-', starting with a letter or digit)"
            )
        return value

    @field_validator("github_account")
    @classmethod
    def _check_account(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("GITHUB_ACCOUNT must not be empty")
        if not _OWNER_NAME.match(value):
            raise ValueError(f"GITHUB_ACCOUNT {value!r} is not a valid GitHub owner name")
        return value

    @field_validator("default_branch")
    @classmethod
    def _check_branch(cls, value: str) -> str:
        value = value.strip()
        if not value or " " in value:
            raise ValueError(f"invalid branch name {value!r}")
        return value

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def repo_slug(self) -> str:
        """``<owner>/<app-name>`` as understood by ``gh``."""
        return f"{self.github_account}/{self.app_name}"

    @property
    def repo_url(self) -> str:
        return f"https://github.com/{self.repo_slug}"

    @property
    def pages_url(self) -> str:
        """GitHub Pages URL for a project site."""
        return f"https://{self.github_account}.github.io/{self.app_name}/"

    def template_context(self) -> dict[str, Any]:
        """Flatten the configuration into the placeholder namespace."""
        return {
            "app_name": self.app_name,
            "github_account": self.github_account,
            "repo_url": self.repo_url,
            "pages_url": self.pages_url,
            **self.theme.model_dump(),
        }


class PipelineOptions(BaseModel):
    """Command-line knobs that are not part of the ``.env`` inputs."""

    log_path: Path | None = Field(default=Path(DEFAULT_LOG_FILE))
    launch_preview: bool = True
    wait_for_pages: bool = False
    pages_timeout: int = Field(default=300, ge=10, description="Seconds to poll the Pages URL")
    ssh_key_path: Path = Field(default_factory=lambda: Path.home() / ".ssh" / "id_rsa")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

# .env key -> ThemeConfig field
THEME_KEYS: dict[str, str] = {
    "PRIMARY_COLOR": "primary_color",
    "PRIMARY_COLOR_DARK": "primary_color_dark",
    "SECONDARY_COLOR": "secondary_color",
    "SECONDARY_COLOR_DARK": "secondary_color_dark",
    "TERTIARY_COLOR": "tertiary_color",
    "TERTIARY_COLOR_DARK": "tertiary_color_dark",
    "IVORY_COLOR": "ivory_color",
    "IVORY_DARK_COLOR": "ivory_dark_color",
    "PRIMARY_FONT": "primary_font",
    "SECONDARY_FONT": "secondary_font",
    "TERTIARY_FONT": "tertiary_font",
}


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY or not value:
        return False
    raise ConfigInvalid(f"{key} must be a boolean (true/false), got {raw!r}")


def config_from_mapping(values: dict[str, str]) -> RunConfiguration:
    """Build a ``RunConfiguration`` from raw ``KEY=VALUE`` pairs.

    Raises:
        ConfigInvalid: If a required key is unset/blank or any value fails
            validation.
    """
    for required in ("APP_NAME", "GITHUB_ACCOUNT"):
        if not values.get(required, "").strip():
            raise ConfigInvalid(f"{required} variable is not set in the configuration.")

    theme_kwargs = {
        field: values[key]
        for key, field in THEME_KEYS.items()
        if values.get(key, "").strip()
    }

    kwargs: dict[str, Any] = {
        "app_name": values["APP_NAME"],
        "github_account": values["GITHUB_ACCOUNT"],
    }
    if "INCLUDE_TRIVIA" in values:
        kwargs["include_trivia"] = _parse_bool("INCLUDE_TRIVIA", values["INCLUDE_TRIVIA"])
    if values.get("REPO_VISIBILITY", "").strip():
        kwargs["repo_visibility"] = values["REPO_VISIBILITY"].strip().lower()
    if values.get("DEFAULT_BRANCH", "").strip():
        kwargs["default_branch"] = values["DEFAULT_BRANCH"]

    try:
        return RunConfiguration(theme=ThemeConfig(**theme_kwargs), **kwargs)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigInvalid(f"Invalid configuration: {problems}") from exc


def load_config(env_file: str | Path = DEFAULT_ENV_FILE) -> RunConfiguration:
    """Load and validate the ``.env`` configuration.

    Raises:
        ConfigMissing: If *env_file* does not exist.
        ConfigInvalid: If the file cannot be decoded, required keys are missing
            or values are invalid.
    """
    path = Path(env_file)
    if not path.is_file():
        raise ConfigMissing(
            f"{path} file not found! Please create a .env file with APP_NAME and GITHUB_ACCOUNT."
        )
    try:
        values = parse_dotenv(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigInvalid(f"Cannot read {path}: {exc}") from exc
    return config_from_mapping(values)
