"""Tests for the route index."""

import pytest
from docshelf.core.errors import RouteCollisionError
from docshelf.core.manifest import Manifest, Route
from docshelf.core.site import RouteIndex, RouteIndexBuilder, build_index
from docshelf.core.types import NavigationMode, SourcePath, URLPath


def _manifest(*routes: Route) -> Manifest:
    return Manifest(versions=("v1",), routes=routes)


class TestBuildIndex:
    """Tests for build_index()."""

    def test__maps_url_paths_to_source_paths(self) -> None:
        """Map every normalized URL path back to its route path."""
        manifest = _manifest(
            Route("./index.md"),
            Route(
                "./guides/index.md",
                children=(Route("./guides/deploy.md"), Route("./guides/setup.md")),
            ),
        )

        index = build_index(manifest)

        assert dict(index.items()) == {
            "": "./index.md",
            "guides": "./guides/index.md",
            "guides/deploy": "./guides/deploy.md",
            "guides/setup": "./guides/setup.md",
        }

    def test__preserves_pre_order(self) -> None:
        """List URL paths depth-first, pre-order."""
        manifest = _manifest(
            Route("a.md", children=(Route("a/x.md", children=(Route("a/x/deep.md"),)),)),
            Route("b.md"),
        )

        index = build_index(manifest)

        assert index.url_paths() == ["a", "a/x", "a/x/deep", "b"]

    def test__collision__raises(self) -> None:
        """Raise RouteCollisionError naming the colliding URL path."""
        manifest = _manifest(
            Route("guides/index.md"),
            Route("guides.md"),
        )

        with pytest.raises(RouteCollisionError) as exc_info:
            build_index(manifest)

        assert exc_info.value.url_path == "guides"
        assert exc_info.value.first == "guides/index.md"
        assert exc_info.value.second == "guides.md"
        assert "'guides'" in str(exc_info.value)

    def test__nested_collision__raises(self) -> None:
        """Detect collisions between routes at different depths."""
        manifest = _manifest(
            Route("./index.md", children=(Route("index.md"),)),
        )

        with pytest.raises(RouteCollisionError) as exc_info:
            build_index(manifest)

        assert exc_info.value.url_path == ""

    def test__empty_manifest__empty_index(self) -> None:
        index = build_index(_manifest())

        assert len(index) == 0
        assert index.url_paths() == []


class TestRelativeMode:
    """Tests for build_index() in relative mode."""

    def test__children_resolved_against_parent(self) -> None:
        """Prefix child paths with the parent's URL path."""
        manifest = _manifest(
            Route("./index.md"),
            Route("guides.md", children=(Route("./deploy.md", children=(Route("aws.md"),)),)),
        )

        index = build_index(manifest, NavigationMode.RELATIVE)

        assert dict(index.items()) == {
            "": "./index.md",
            "guides": "guides.md",
            "guides/deploy": "guides/deploy.md",
            "guides/deploy/aws": "guides/deploy/aws.md",
        }

    def test__stores_resolved_document_path(self) -> None:
        """A child stores the document it resolved to, not its route path."""
        child = Route("deploy.md")
        manifest = _manifest(Route("guides.md", children=(child,)))

        entry = build_index(manifest, NavigationMode.RELATIVE).get_entry("guides/deploy")

        assert entry is not None
        assert entry.source_path == "guides/deploy.md"
        assert entry.source_path != child.path

    def test__children_of_root_page__unprefixed(self) -> None:
        manifest = _manifest(Route("index.md", children=(Route("intro.md"),)))

        index = build_index(manifest, NavigationMode.RELATIVE)

        assert index.url_paths() == ["", "intro"]

    def test__index_child__collides_with_parent(self) -> None:
        """A child index page resolves to its parent's URL path."""
        manifest = _manifest(Route("guides.md", children=(Route("index.md"),)))

        with pytest.raises(RouteCollisionError) as exc_info:
            build_index(manifest, NavigationMode.RELATIVE)

        assert exc_info.value.url_path == "guides"


class TestRouteIndex:
    """Tests for RouteIndex lookups."""

    @pytest.fixture
    def index(self) -> RouteIndex:
        manifest = _manifest(
            Route("index.md"),
            Route("guides/index.md", children=(Route("guides/deploy.md"), Route("guides/setup.md"))),
        )
        return build_index(manifest)

    def test__get_source__accepts_leading_slash(self, index: RouteIndex) -> None:
        assert index.get_source("/guides/deploy") == "guides/deploy.md"
        assert index.get_source("guides/deploy/") == "guides/deploy.md"

    def test__get_source__unknown__returns_none(self, index: RouteIndex) -> None:
        assert index.get_source("missing") is None

    def test__contains(self, index: RouteIndex) -> None:
        assert "" in index
        assert "guides" in index
        assert "guides/missing" not in index

    def test__get_children__in_manifest_order(self, index: RouteIndex) -> None:
        children = index.get_children("guides")

        assert [child.url_path for child in children] == ["guides/deploy", "guides/setup"]

    def test__get_parent(self, index: RouteIndex) -> None:
        parent = index.get_parent("guides/setup")

        assert parent is not None
        assert parent.url_path == "guides"
        assert index.get_parent("guides") is None

    def test__roots(self, index: RouteIndex) -> None:
        assert [entry.url_path for entry in index.roots()] == ["", "guides"]


class TestRouteIndexBuilder:
    """Tests for RouteIndexBuilder."""

    def test__add_route__tracks_children(self) -> None:
        builder = RouteIndexBuilder()
        parent = builder.add_route(URLPath("guides"), SourcePath("guides.md"))
        builder.add_route(URLPath("guides/a"), SourcePath("guides/a.md"), parent)

        index = builder.build()

        assert [e.url_path for e in index.get_children("guides")] == ["guides/a"]

    def test__add_route__duplicate__raises(self) -> None:
        builder = RouteIndexBuilder()
        builder.add_route(URLPath("a"), SourcePath("a.md"))

        with pytest.raises(RouteCollisionError):
            builder.add_route(URLPath("a"), SourcePath("a/index.md"))
