"""Tests for manifest loading."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from docshelf.core.errors import ManifestNotFoundError, ManifestParseError
from docshelf.core.manifest import Manifest, ManifestLoader, Route, load_manifest


class TestLoadManifest:
    """Tests for load_manifest()."""

    def test__valid_manifest__parses_routes(self, write_manifest: Callable[..., Path]) -> None:
        """Parse versions and the nested route tree."""
        path = write_manifest(
            [
                {"path": "./index.md"},
                {"path": "./guides/index.md", "children": [{"path": "./guides/deploy.md"}]},
            ],
            versions=["v1.2", "v1.1"],
        )

        manifest = load_manifest(path)

        assert manifest == Manifest(
            versions=("v1.2", "v1.1"),
            routes=(
                Route(path="./index.md"),
                Route(
                    path="./guides/index.md",
                    children=(Route(path="./guides/deploy.md"),),
                ),
            ),
        )
        assert manifest.current_version == "v1.2"

    def test__missing_file__raises_not_found(self, tmp_path: Path) -> None:
        """Raise ManifestNotFoundError naming the path."""
        path = tmp_path / "manifest.json"

        with pytest.raises(ManifestNotFoundError) as exc_info:
            load_manifest(path)

        assert exc_info.value.path == path
        assert str(path) in str(exc_info.value)

    def test__invalid_json__raises_parse_error(self, tmp_path: Path) -> None:
        """Raise ManifestParseError for syntax errors."""
        path = tmp_path / "manifest.json"
        path.write_text('{"versions": [', encoding="utf-8")

        with pytest.raises(ManifestParseError) as exc_info:
            load_manifest(path)

        assert exc_info.value.path == path

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ([], "manifest must be an object"),
            ({"routes": []}, "versions must be a non-empty list"),
            ({"versions": [], "routes": []}, "versions must be a non-empty list"),
            ({"versions": [1], "routes": []}, "versions items must be strings"),
            ({"versions": ["v1"]}, "routes must be a list"),
            ({"versions": ["v1"], "routes": ["index.md"]}, "items must be objects"),
            ({"versions": ["v1"], "routes": [{"title": "x"}]}, "path must be a string"),
            (
                {"versions": ["v1"], "routes": [{"path": "a.md", "children": {}}]},
                "must be a list",
            ),
        ],
    )
    def test__wrong_shape__raises_parse_error(
        self, tmp_path: Path, data: object, message: str
    ) -> None:
        """Raise ManifestParseError describing the shape problem."""
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ManifestParseError, match=message):
            load_manifest(path)

    def test__errors__are_builtin_subclasses(self, tmp_path: Path) -> None:
        """Manifest errors can be caught as builtin errors."""
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "missing.json")


class TestManifestLoader:
    """Tests for ManifestLoader."""

    def test__load__memoizes(self, write_manifest: Callable[..., Path]) -> None:
        """Return the same manifest even after the file disappears."""
        path = write_manifest([{"path": "index.md"}])
        loader = ManifestLoader(path)

        first = loader.load()
        path.unlink()
        second = loader.load()

        assert first is second

    def test__clear__reloads(self, write_manifest: Callable[..., Path]) -> None:
        """Parse the file again after clear()."""
        path = write_manifest([{"path": "index.md"}], versions=["v1"])
        loader = ManifestLoader(path)
        loader.load()

        write_manifest([{"path": "index.md"}], versions=["v2"])
        loader.clear()

        assert loader.load().current_version == "v2"

    def test__separate_loaders__do_not_share_state(
        self, write_manifest: Callable[..., Path]
    ) -> None:
        """Independent loaders parse independently."""
        path = write_manifest([{"path": "index.md"}], versions=["v1"])
        ManifestLoader(path).load()

        write_manifest([{"path": "index.md"}], versions=["v2"])

        assert ManifestLoader(path).load().current_version == "v2"
