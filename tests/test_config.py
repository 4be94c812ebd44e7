"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from docshelf.config import Config
from docshelf.core.types import NavigationMode


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 3000

[content]
content_dir = "documentation"
manifest = "routes.json"
navigation_mode = "relative"

[build]
output_dir = "dist"
jobs = 4
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.content.content_dir == tmp_path / "documentation"
        assert config.content.manifest == "routes.json"
        assert config.content.navigation_mode is NavigationMode.RELATIVE
        assert config.build.output_dir == tmp_path / "dist"
        assert config.build.jobs == 4
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.content.content_dir == tmp_path / "content"
        assert config.content.manifest == "manifest.json"
        assert config.content.navigation_mode is NavigationMode.ABSOLUTE
        assert config.build.output_dir == tmp_path / "out"
        assert config.build.jobs == 1

    def test__missing_explicit_path__raises_error(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for missing explicit config file."""
        config_file = tmp_path / "nonexistent.toml"

        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(config_file)

    def test__invalid_toml__raises_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text("[server\nport = ")

        with pytest.raises(ValueError, match="Invalid configuration file"):
            Config.load(config_file)

    def test__no_path_no_discovery__returns_defaults(self) -> None:
        """Return defaults when no config file found."""
        with patch.object(Config, "_discover_config", return_value=None):
            config = Config.load()

        assert config.server.port == 8080
        assert config.content.content_dir == Path("content")
        assert config.build.output_dir == Path("out")
        assert config.config_path is None


class TestConfigDiscovery:
    """Tests for config file discovery."""

    def test__config_in_current_dir__found(self, tmp_path: Path) -> None:
        """Find config in current directory."""
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text("[server]\nport = 9000")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            discovered = Config._discover_config()

        assert discovered == config_file

    def test__config_in_parent_dir__found(self, tmp_path: Path) -> None:
        """Find config in parent directory."""
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text("[server]\nport = 9000")
        subdir = tmp_path / "docs" / "guides"
        subdir.mkdir(parents=True)

        with patch("pathlib.Path.cwd", return_value=subdir):
            discovered = Config._discover_config()

        assert discovered == config_file


class TestSectionParsing:
    """Tests for section validation."""

    @pytest.mark.parametrize(
        ("toml", "message"),
        [
            ("server = 1", "server section must be a dictionary"),
            ('[server]\nhost = 1', "server.host must be a string"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ("[server]\nport = true", "server.port must be an integer"),
            ("[content]\ncontent_dir = 1", "content.content_dir must be a string"),
            ("[content]\nmanifest = []", "content.manifest must be a string"),
            ('[content]\nnavigation_mode = "tree"', "content.navigation_mode must be one of"),
            ("[build]\noutput_dir = 1", "build.output_dir must be a string"),
            ("[build]\njobs = 0", "build.jobs must be a positive integer"),
        ],
    )
    def test__invalid_value__raises_error(self, tmp_path: Path, toml: str, message: str) -> None:
        """Raise ValueError naming the offending key."""
        config_file = tmp_path / "docshelf.toml"
        config_file.write_text(toml)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestConfigWithOverrides:
    """Tests for Config.with_overrides method."""

    def test__no_overrides__returns_same_values(self) -> None:
        """When no overrides are provided, values remain unchanged."""
        original = Config._default()

        result = original.with_overrides()

        assert result == original

    def test__override_port__changes_only_port(self) -> None:
        original = Config._default()

        result = original.with_overrides(port=9000)

        assert result.server.port == 9000
        assert result.server.host == original.server.host

    def test__override_content_dir__keeps_mode(self) -> None:
        """Override content_dir changes only content.content_dir."""
        original = Config._default()

        result = original.with_overrides(content_dir=Path("/custom/content"))

        assert result.content.content_dir == Path("/custom/content")
        assert result.content.navigation_mode is original.content.navigation_mode
        assert result.content.manifest == original.content.manifest

    def test__override_build__does_not_modify_original(self) -> None:
        original = Config._default()

        result = original.with_overrides(output_dir=Path("/tmp/site"), jobs=8)

        assert result.build.output_dir == Path("/tmp/site")
        assert result.build.jobs == 8
        assert original.build.jobs == 1

    def test__override_navigation_mode(self) -> None:
        result = Config._default().with_overrides(navigation_mode=NavigationMode.RELATIVE)

        assert result.content.navigation_mode is NavigationMode.RELATIVE
