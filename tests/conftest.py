"""Shared test fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml
from docshelf.config import BuildConfig, Config, ContentConfig, ServerConfig


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create an empty content directory."""
    content = tmp_path / "content"
    content.mkdir(exist_ok=True)
    return content


@pytest.fixture
def write_doc(content_dir: Path) -> Callable[..., Path]:
    """Write a markdown document with front matter.

    Pass title=None to omit the title from the header.
    """

    def _write(source_path: str, title: str | None, body: str = "", **fields: Any) -> Path:
        path = content_dir / source_path
        path.parent.mkdir(parents=True, exist_ok=True)
        header = dict(fields)
        if title is not None:
            header = {"title": title, **header}
        text = "---\n" + yaml.safe_dump(header, sort_keys=False) + "---\n" + body
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_manifest(content_dir: Path) -> Callable[..., Path]:
    """Write manifest.json into the content directory."""

    def _write(routes: list[dict[str, Any]], versions: list[str] | None = None) -> Path:
        path = content_dir / "manifest.json"
        data = {"versions": versions or ["v1.0"], "routes": routes}
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_site(
    content_dir: Path,
    write_doc: Callable[..., Path],
    write_manifest: Callable[..., Path],
) -> Path:
    """Home page with a nested deploy guide."""
    write_doc("index.md", "Home", "# Welcome\n\nSee [deploy](guides/deploy.md).\n")
    write_doc(
        "guides/deploy.md",
        "Deploy",
        "# Deploy\n\n<!-- draft -->Steps.\n\n## Next Steps\n\nBack [home](../index.md).\n",
        description="Ship it",
    )
    write_manifest(
        [{"path": "./index.md", "children": [{"path": "./guides/deploy.md"}]}],
        versions=["v2.1", "v2.0"],
    )
    return content_dir


@pytest.fixture
def test_config(tmp_path: Path, content_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(content_dir=content_dir),
        build=BuildConfig(output_dir=tmp_path / "out"),
    )
