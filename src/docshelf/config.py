"""Configuration management for Docshelf.

Settings live in a docshelf.toml file, found by walking up from the working
directory unless a path is given explicitly.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from docshelf.core.manifest import MANIFEST_FILENAME
from docshelf.core.types import NavigationMode

CONFIG_FILENAME = "docshelf.toml"


@dataclass
class ServerConfig:
    """HTTP API server settings."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Content source configuration."""

    content_dir: Path = field(default_factory=lambda: Path("content"))
    manifest: str = MANIFEST_FILENAME
    navigation_mode: NavigationMode = NavigationMode.ABSOLUTE


@dataclass
class BuildConfig:
    """Static build configuration."""

    output_dir: Path = field(default_factory=lambda: Path("out"))
    jobs: int = 1


@dataclass
class Config:
    """Top-level docshelf settings, one attribute per TOML table."""

    server: ServerConfig
    content: ContentConfig
    build: BuildConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load the docshelf configuration.

        An explicit config_path must exist. Without one, docshelf.toml is
        looked up from the working directory upwards; when none is found
        every setting takes its default.

        Args:
            config_path: Config file given on the command line, if any

        Returns:
            Config with defaults filled in for absent sections

        Raises:
            FileNotFoundError: If config_path is given but missing
            ValueError: If a value has the wrong type or the TOML is malformed
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        found = cls._discover_config()
        return cls._default() if found is None else cls._load_from_file(found)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Return the nearest docshelf.toml at or above the working directory."""
        cwd = Path.cwd()
        for directory in (cwd, *cwd.parents):
            candidate = directory / CONFIG_FILENAME
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            build=BuildConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Parse one TOML file; relative directories resolve against its parent."""
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            build=cls._parse_build(data.get("build"), config_dir),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse the [server] table."""
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(content_dir=config_dir / "content")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        content_dir = data.get("content_dir", "content")
        if not isinstance(content_dir, str):
            raise ValueError("content.content_dir must be a string")

        manifest = data.get("manifest", MANIFEST_FILENAME)
        if not isinstance(manifest, str):
            raise ValueError("content.manifest must be a string")

        mode_raw = data.get("navigation_mode", NavigationMode.ABSOLUTE.value)
        try:
            navigation_mode = NavigationMode(mode_raw)
        except ValueError:
            choices = ", ".join(mode.value for mode in NavigationMode)
            raise ValueError(f"content.navigation_mode must be one of: {choices}") from None

        return ContentConfig(
            content_dir=config_dir / content_dir,
            manifest=manifest,
            navigation_mode=navigation_mode,
        )

    @classmethod
    def _parse_build(cls, data: object, config_dir: Path) -> BuildConfig:
        """Parse build configuration section.

        Args:
            data: Raw build section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            BuildConfig instance
        """
        if data is None:
            return BuildConfig(output_dir=config_dir / "out")

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        output_dir = data.get("output_dir", "out")
        if not isinstance(output_dir, str):
            raise ValueError("build.output_dir must be a string")

        jobs = data.get("jobs", 1)
        if not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1:
            raise ValueError("build.jobs must be a positive integer")

        return BuildConfig(output_dir=config_dir / output_dir, jobs=jobs)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        content_dir: Path | None = None,
        output_dir: Path | None = None,
        jobs: int | None = None,
        navigation_mode: NavigationMode | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            content_dir: Override content.content_dir
            output_dir: Override build.output_dir
            jobs: Override build.jobs
            navigation_mode: Override content.navigation_mode

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if content_dir is not None or navigation_mode is not None:
            content = replace(
                self.content,
                content_dir=content_dir if content_dir is not None else self.content.content_dir,
                navigation_mode=(
                    navigation_mode if navigation_mode is not None else self.content.navigation_mode
                ),
            )

        build = self.build
        if output_dir is not None or jobs is not None:
            build = replace(
                self.build,
                output_dir=output_dir if output_dir is not None else self.build.output_dir,
                jobs=jobs if jobs is not None else self.build.jobs,
            )

        return replace(self, server=server, content=content, build=build)
