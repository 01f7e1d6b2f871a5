"""Unit tests for configuration loading (steampunk_setup.config).

Tests cover:
- parse_dotenv syntax (quotes, export, full-line and trailing comments, blank lines)
- load_config: missing or undecodable file, missing/blank required keys, invalid values
- Theme defaults and overrides
- INCLUDE_TRIVIA / REPO_VISIBILITY / DEFAULT_BRANCH extras
- Derived URLs and the template context
- Immutability
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from steampunk_setup.config import (
    PipelineOptions,
    RunConfiguration,
    ThemeConfig,
    config_from_mapping,
    load_config,
    parse_dotenv,
)
from steampunk_setup.errors import ConfigInvalid, ConfigMissing

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# parse_dotenv
# ---------------------------------------------------------------------------


class TestParseDotenv:
    def test_plain_pairs(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=goggles-app\nGITHUB_ACCOUNT=acme\n")
        assert parse_dotenv(env) == {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme"}

    def test_quotes_export_and_comments(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text(
            "# project settings\n"
            "\n"
            'export APP_NAME="goggles-app"\n'
            "PRIMARY_FONT='Special Elite'\n"
            "not a pair\n"
        )
        assert parse_dotenv(env) == {"APP_NAME": "goggles-app", "PRIMARY_FONT": "Special Elite"}

    def test_value_may_contain_equals(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("TOKEN=a=b=c\n")
        assert parse_dotenv(env) == {"TOKEN": "a=b=c"}

    def test_no_variable_expansion(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=$HOME\n")
        assert parse_dotenv(env)["APP_NAME"] == "$HOME"

    def test_trailing_comment_after_unquoted_value(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=goggles-app # demo project\nGITHUB_ACCOUNT=acme\t# owner\n")
        assert parse_dotenv(env) == {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme"}

    def test_hash_inside_value_is_kept(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text(
            "PRIMARY_COLOR=#B87333\n"
            'PRIMARY_FONT="Special # Elite" # quoted\n'
            "TOKEN=abc#def\n"
        )
        assert parse_dotenv(env) == {
            "PRIMARY_COLOR": "#B87333",
            "PRIMARY_FONT": "Special # Elite",
            "TOKEN": "abc#def",
        }


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_missing_file_raises_config_missing(self, tmp_path: Path):
        with pytest.raises(ConfigMissing):
            load_config(tmp_path / ".env")

    def test_minimal_config(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=goggles-app\nGITHUB_ACCOUNT=acme\n")
        config = load_config(env)
        assert config.app_name == "goggles-app"
        assert config.github_account == "acme"
        assert config.theme == ThemeConfig()
        assert config.include_trivia is False
        assert config.repo_visibility == "public"
        assert config.default_branch == "main"

    @pytest.mark.parametrize("content", ["GITHUB_ACCOUNT=acme\n", "APP_NAME=\nGITHUB_ACCOUNT=acme\n", "APP_NAME=   \nGITHUB_ACCOUNT=acme\n"])
    def test_app_name_unset_or_blank(self, tmp_path: Path, content: str):
        env = tmp_path / ".env"
        env.write_text(content)
        with pytest.raises(ConfigInvalid, match="APP_NAME"):
            load_config(env)

    def test_github_account_unset(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=goggles-app\n")
        with pytest.raises(ConfigInvalid, match="GITHUB_ACCOUNT"):
            load_config(env)

    def test_commented_app_name_loads(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=goggles-app # demo\nGITHUB_ACCOUNT=acme\n")
        assert load_config(env).app_name == "goggles-app"

    def test_undecodable_file_is_invalid_config(self, tmp_path: Path):
        env = tmp_path / ".env"
        env.write_bytes(b"APP_NAME=\xff\xfe\nGITHUB_ACCOUNT=acme\n")
        with pytest.raises(ConfigInvalid, match="Cannot read"):
            load_config(env)

    @pytest.mark.parametrize("name", ["my app", "../escape", "a/b", "..", ".", ".hidden", "-x", "--help", "_private"])
    def test_app_name_must_be_directory_safe(self, name: str):
        with pytest.raises(ConfigInvalid, match="APP_NAME"):
            config_from_mapping({"APP_NAME": name, "GITHUB_ACCOUNT": "acme"})

    def test_invalid_owner(self):
        with pytest.raises(ConfigInvalid, match="github_account"):
            config_from_mapping({"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "-acme"})


class TestThemeKeys:
    def test_overrides_replace_defaults(self):
        config = config_from_mapping(
            {
                "APP_NAME": "goggles-app",
                "GITHUB_ACCOUNT": "acme",
                "PRIMARY_COLOR": "#112233",
                "TERTIARY_FONT": "IM Fell English",
            }
        )
        assert config.theme.primary_color == "#112233"
        assert config.theme.tertiary_font == "IM Fell English"
        assert config.theme.secondary_color == "#CD7F32"

    def test_blank_theme_value_falls_back_to_default(self):
        config = config_from_mapping(
            {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "PRIMARY_COLOR": ""}
        )
        assert config.theme.primary_color == "#B87333"

    def test_hex_normalized_to_upper_case(self):
        config = config_from_mapping(
            {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "IVORY_COLOR": "#fffff0"}
        )
        assert config.theme.ivory_color == "#FFFFF0"

    @pytest.mark.parametrize("color", ["B87333", "#GGGGGG", "#12345", "copper"])
    def test_invalid_color(self, color: str):
        with pytest.raises(ConfigInvalid, match="primary_color"):
            config_from_mapping(
                {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "PRIMARY_COLOR": color}
            )

    def test_font_with_quotes_rejected(self):
        with pytest.raises(ConfigInvalid, match="primary_font"):
            config_from_mapping(
                {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "PRIMARY_FONT": 'Evil"Font'}
            )

    def test_fonts_order(self):
        assert ThemeConfig().fonts() == ["Special Elite", "Arbutus Slab", "Cinzel"]


class TestExtraKeys:
    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("YES", True), ("off", False), ("", False)])
    def test_include_trivia(self, raw: str, expected: bool):
        config = config_from_mapping(
            {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "INCLUDE_TRIVIA": raw}
        )
        assert config.include_trivia is expected

    def test_include_trivia_garbage(self):
        with pytest.raises(ConfigInvalid, match="INCLUDE_TRIVIA"):
            config_from_mapping(
                {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "INCLUDE_TRIVIA": "maybe"}
            )

    def test_private_visibility(self):
        config = config_from_mapping(
            {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "REPO_VISIBILITY": "Private"}
        )
        assert config.repo_visibility == "private"

    def test_unknown_visibility(self):
        with pytest.raises(ConfigInvalid):
            config_from_mapping(
                {"APP_NAME": "goggles-app", "GITHUB_ACCOUNT": "acme", "REPO_VISIBILITY": "secret"}
            )


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


class TestDerivedValues:
    def test_urls(self, run_config: RunConfiguration):
        assert run_config.repo_slug == "acme/goggles-app"
        assert run_config.repo_url == "https://github.com/acme/goggles-app"
        assert run_config.pages_url == "https://acme.github.io/goggles-app/"

    def test_template_context_is_flat(self, run_config: RunConfiguration):
        context = run_config.template_context()
        assert context["app_name"] == "goggles-app"
        assert context["github_account"] == "acme"
        assert context["primary_color"] == "#B87333"
        assert context["tertiary_font"] == "Cinzel"
        assert context["pages_url"] == "https://acme.github.io/goggles-app/"
        assert all(not isinstance(value, dict) for value in context.values())

    def test_configuration_is_immutable(self, run_config: RunConfiguration):
        with pytest.raises(ValidationError):
            run_config.app_name = "other"  # type: ignore[misc]


class TestPipelineOptions:
    def test_defaults(self):
        options = PipelineOptions()
        assert options.log_path == Path("steampunk_setup.log")
        assert options.launch_preview is True
        assert options.wait_for_pages is False

    def test_pages_timeout_lower_bound(self):
        with pytest.raises(ValidationError):
            PipelineOptions(pages_timeout=1)
