"""Source document loading and sanitizing.

Reads a markdown document, splits its YAML front matter from the body,
strips authoring comments, rewrites intra-site links to site paths and
derives heading anchors. Output stays markdown; turning it into HTML is the
render layer's job.
"""

import logging
import posixpath
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from frontmatter import YAMLHandler

from docshelf.core.errors import (
    FrontMatterMissingTitleError,
    FrontMatterParseError,
    SourceNotFoundError,
)
from docshelf.core.paths import (
    INDEX_SEGMENT,
    join_url_path,
    strip_index_segment,
    strip_markdown_extension,
)

logger = logging.getLogger(__name__)

_HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_ATX_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_SETEXT_UNDERLINE_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_CODE_SPAN_RE = re.compile(r"(`+)[^`]*?\1")
# One level of bracket nesting so [![badge](img.svg)](target) matches as a whole
_INLINE_LINK_RE = re.compile(
    r"(?P<bang>!?)\[(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)\]"
    r"\((?P<space>\s*)(?P<target><[^>]*>|[^)\s]+)(?P<rest>(?:\s+\"[^\"]*\"|\s+'[^']*')?\s*)\)",
)
_REFERENCE_DEF_RE = re.compile(r"^(?P<head> {0,3}\[(?!\^)[^\]]+\]:[ \t]*)(?P<target>\S+)(?P<rest>.*)$")
_HTML_ATTR_RE = re.compile(
    r"(?P<head><(?P<tag>a|img)\b[^>]*?\b(?P<attr>href|src)=)(?P<quote>[\"'])(?P<target>.*?)(?P=quote)",
    re.IGNORECASE,
)
_WORD_RE = re.compile(r"[^\W\d_]+|\d+")
_APOSTROPHES_RE = re.compile(r"['’]")
_CODE_SPAN_TEXT_RE = re.compile(r"(`+)(.+?)\1")
_EMPHASIS_RE = re.compile(r"(\*{1,3}|~~)(?=\S)(.+?)(?<=\S)\1")
# Underscore emphasis only opens and closes at word boundaries: snake_case stays intact
_UNDERSCORE_EMPHASIS_RE = re.compile(r"(?<!\w)(_{1,3})(?=\S)(.+?)(?<=\S)\1(?!\w)")


@dataclass(frozen=True)
class FrontMatter:
    """Document metadata from the YAML header."""

    title: str
    description: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {key: _json_safe(value) for key, value in self.extra.items()}
        result["title"] = self.title
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class Heading:
    """Heading with its anchor id."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        return {"level": self.level, "title": self.title, "id": self.id}


@dataclass(frozen=True)
class Link:
    """Link found in a document body.

    Attributes:
        target: Target as written in the source
        href: Target after rewriting
        external: Whether the link leaves the site (render in a new context)
        image: Whether the link is an image source
    """

    target: str
    href: str
    external: bool = False
    image: bool = False

    def to_dict(self) -> dict[str, str | bool]:
        """Convert to dictionary for JSON serialization."""
        return {
            "target": self.target,
            "href": self.href,
            "external": self.external,
            "image": self.image,
        }


@dataclass(frozen=True)
class Document:
    """Loaded document: metadata plus sanitized body."""

    front_matter: FrontMatter
    body: str
    headings: list[Heading] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)


def parse_front_matter(text: str, source_path: str) -> tuple[FrontMatter, str]:
    """Split front matter from the body.

    Args:
        text: Raw document text
        source_path: Document path, for error messages

    Returns:
        Tuple of (front matter, raw body)

    Raises:
        FrontMatterParseError: If the header is malformed
        FrontMatterMissingTitleError: If the header has no title
    """
    handler = YAMLHandler()
    if not handler.detect(text):
        raise FrontMatterMissingTitleError(source_path)

    try:
        header, body = handler.split(text)
    except ValueError:
        raise FrontMatterParseError(source_path, "unterminated front matter block") from None

    try:
        data = handler.load(header)
    except yaml.YAMLError as e:
        raise FrontMatterParseError(source_path, str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterParseError(source_path, "front matter must be a mapping")

    return _build_front_matter(data, source_path), body.lstrip("\r\n")


def _build_front_matter(data: dict[str, Any], source_path: str) -> FrontMatter:
    """Validate front matter fields."""
    title = data.get("title")
    if title is None:
        raise FrontMatterMissingTitleError(source_path)
    if not isinstance(title, str):
        raise FrontMatterParseError(source_path, "title must be a string")
    if not title.strip():
        raise FrontMatterMissingTitleError(source_path)

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise FrontMatterParseError(source_path, "description must be a string")

    extra = {key: value for key, value in data.items() if key not in ("title", "description")}
    return FrontMatter(title=title, description=description, extra=extra)


def strip_html_comments(text: str) -> str:
    """Remove ``<!-- ... -->`` ranges, including multi-line ones."""
    return _HTML_COMMENT_RE.sub("", text)


def is_external(target: str) -> bool:
    """Check whether a link target points outside the site."""
    return target.startswith(("http://", "https://"))


def rewrite_link(target: str, current_url_path: str) -> Link:
    """Rewrite a link target relative to the current page.

    External and scheme links, and in-page fragments, are returned as-is.
    Site links lose their markdown extension and trailing index segment and
    are resolved against the parent of the current URL path, keeping their
    own fragment.

    Args:
        target: Link target as written (e.g., "../setup/index.md#install")
        current_url_path: URL path of the page containing the link

    Returns:
        Link with the rewritten href
    """
    if is_external(target):
        return Link(target=target, href=target, external=True)
    if not target or target.startswith("#") or _SCHEME_RE.match(target):
        return Link(target=target, href=target)

    path, sep, fragment = target.partition("#")
    path = strip_index_segment(strip_markdown_extension(path))

    if path.startswith("/"):
        resolved = posixpath.normpath(path)
    else:
        base = current_url_path.split("#")[0].strip("/")
        resolved = posixpath.normpath(posixpath.join("/", base, "..", path))

    return Link(target=target, href=f"{resolved}{sep}{fragment}")


def rewrite_asset(target: str) -> Link:
    """Root a relative image source at the site root."""
    if is_external(target):
        return Link(target=target, href=target, external=True, image=True)
    if not target or target.startswith("/") or _SCHEME_RE.match(target):
        return Link(target=target, href=target, image=True)
    return Link(target=target, href=posixpath.normpath(f"/{target}"), image=True)


def slugify_heading(text: str) -> str:
    """Derive an anchor id from heading text.

    Lower-cases the text and converts it to kebab case. Depends on the text
    only, so identical headings always share an id.
    """
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _APOSTROPHES_RE.sub("", text)
    return "-".join(_WORD_RE.findall(text))


def heading_text(raw: str) -> str:
    """Reduce inline markdown in a heading to plain text.

    Links keep their text, code spans their content and emphasis its inner
    text. Underscores inside words are not emphasis and are kept.
    """
    text = _INLINE_LINK_RE.sub(lambda m: m.group("text"), raw)
    parts: list[str] = []
    position = 0
    for span in _CODE_SPAN_TEXT_RE.finditer(text):
        parts.append(_strip_emphasis(text[position : span.start()]))
        parts.append(span.group(2).strip())
        position = span.end()
    parts.append(_strip_emphasis(text[position:]))
    return "".join(parts).strip()


def _strip_emphasis(text: str) -> str:
    text = _EMPHASIS_RE.sub(lambda m: m.group(2), text)
    return _UNDERSCORE_EMPHASIS_RE.sub(lambda m: m.group(2), text)


class _BodyTransformer:
    """Single pass over a markdown body outside fenced code blocks."""

    def __init__(self, current_url_path: str) -> None:
        self._current_url_path = current_url_path
        self.headings: list[Heading] = []
        self.links: list[Link] = []

    def transform(self, body: str) -> str:
        lines = body.splitlines(keepends=True)
        output: list[str] = []
        fence: str | None = None
        previous: str | None = None

        for line in lines:
            stripped = line.rstrip("\r\n")
            fence_match = _FENCE_RE.match(stripped)

            if fence is not None:
                if fence_match and fence_match.group(1).startswith(fence):
                    fence = None
                output.append(line)
                previous = None
                continue

            if fence_match:
                fence = fence_match.group(1)
                output.append(line)
                previous = None
                continue

            self._collect_heading(stripped, previous)
            output.append(self._rewrite_line(line))
            previous = stripped if stripped.strip() else None

        return "".join(output)

    def _collect_heading(self, line: str, previous: str | None) -> None:
        atx = _ATX_HEADING_RE.match(line)
        if atx:
            self._add_heading(len(atx.group(1)), atx.group(2))
            return

        setext = _SETEXT_UNDERLINE_RE.match(line)
        if setext and previous is not None and not _ATX_HEADING_RE.match(previous):
            level = 1 if setext.group(1).startswith("=") else 2
            self._add_heading(level, previous.strip())

    def _add_heading(self, level: int, raw: str) -> None:
        title = heading_text(raw)
        if title:
            self.headings.append(Heading(level=level, title=title, id=slugify_heading(title)))

    def _rewrite_line(self, line: str) -> str:
        reference = _REFERENCE_DEF_RE.match(line.rstrip("\r\n"))
        if reference:
            link = rewrite_link(reference.group("target"), self._current_url_path)
            self.links.append(link)
            ending = line[len(line.rstrip("\r\n")) :]
            return f"{reference.group('head')}{link.href}{reference.group('rest')}{ending}"

        # Code spans are copied through untouched
        parts: list[str] = []
        position = 0
        for span in _CODE_SPAN_RE.finditer(line):
            parts.append(self._rewrite_text(line[position : span.start()]))
            parts.append(span.group(0))
            position = span.end()
        parts.append(self._rewrite_text(line[position:]))
        return "".join(parts)

    def _rewrite_text(self, text: str) -> str:
        text = _INLINE_LINK_RE.sub(self._replace_inline, text)
        return _HTML_ATTR_RE.sub(self._replace_html, text)

    def _replace_inline(self, match: re.Match[str]) -> str:
        image = bool(match.group("bang"))
        inner = match.group("text") if image else self._rewrite_text(match.group("text"))

        target = match.group("target")
        bracketed = target.startswith("<") and target.endswith(">")
        if bracketed:
            target = target[1:-1]

        link = self._rewrite(target, image=image)
        href = f"<{link.href}>" if bracketed else link.href
        return (
            f"{match.group('bang')}[{inner}]"
            f"({match.group('space')}{href}{match.group('rest')})"
        )

    def _replace_html(self, match: re.Match[str]) -> str:
        image = match.group("attr").lower() == "src"
        link = self._rewrite(match.group("target"), image=image)
        quote = match.group("quote")
        return f"{match.group('head')}{quote}{link.href}{quote}"

    def _rewrite(self, target: str, *, image: bool) -> Link:
        if image:
            link = rewrite_asset(target)
        else:
            link = rewrite_link(target, self._current_url_path)
        self.links.append(link)
        return link


def sanitize_body(body: str, current_url_path: str) -> tuple[str, list[Heading], list[Link]]:
    """Strip comments, rewrite links and collect headings.

    Args:
        body: Raw markdown body (without front matter)
        current_url_path: URL path the body is served at

    Returns:
        Tuple of (sanitized body, headings, links)
    """
    transformer = _BodyTransformer(current_url_path)
    content = transformer.transform(strip_html_comments(body))
    return content, transformer.headings, transformer.links


class ContentLoader:
    """Loads source documents from the content directory.

    Documents are read from disk on every call; nothing is cached.
    """

    def __init__(self, content_dir: Path) -> None:
        """Initialize loader.

        Args:
            content_dir: Root directory containing the manifest and documents
        """
        self._content_dir = content_dir

    @property
    def content_dir(self) -> Path:
        """Root directory containing the manifest and documents."""
        return self._content_dir

    def resolve(self, source_path: str) -> Path:
        """Resolve a source path to a file under the content directory.

        Raises:
            SourceNotFoundError: If the path escapes the content directory
        """
        root = self._content_dir.resolve()
        path = (root / source_path).resolve()
        if not path.is_relative_to(root):
            raise SourceNotFoundError(source_path)
        return path

    def load_page(self, source_path: str, current_url_path: str) -> Document:
        """Load and sanitize a document.

        Args:
            source_path: Document path relative to the content directory
            current_url_path: URL path the document is served at

        Returns:
            Document with front matter, sanitized body, headings and links

        Raises:
            SourceNotFoundError: If the document can't be read
            FrontMatterParseError: If the header is malformed
            FrontMatterMissingTitleError: If the header has no title
        """
        path = self.resolve(source_path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise _read_error(source_path, e) from e

        front_matter, body = parse_front_matter(text, source_path)
        content, headings, links = sanitize_body(body, _link_base(source_path, current_url_path))
        logger.debug(
            f"Loaded {source_path} ({len(headings)} headings, {len(links)} links)",
        )
        return Document(front_matter=front_matter, body=content, headings=headings, links=links)

    def read_front_matter(self, source_path: str) -> FrontMatter:
        """Read only the front matter of a document.

        Stops reading at the closing delimiter; the body is never loaded.

        Raises:
            SourceNotFoundError: If the document can't be read
            FrontMatterParseError: If the header is malformed
            FrontMatterMissingTitleError: If the header has no title
        """
        path = self.resolve(source_path)
        try:
            header = _read_header(path)
        except (OSError, UnicodeDecodeError) as e:
            raise _read_error(source_path, e) from e

        front_matter, _ = parse_front_matter(header, source_path)
        return front_matter


def _read_error(source_path: str, error: OSError | UnicodeDecodeError) -> SourceNotFoundError:
    if isinstance(error, FileNotFoundError):
        return SourceNotFoundError(source_path)
    if isinstance(error, UnicodeDecodeError):
        return SourceNotFoundError(source_path, f"not valid UTF-8 at byte {error.start}")
    return SourceNotFoundError(source_path, error.strerror or str(error))


def _link_base(source_path: str, url_path: str) -> str:
    """URL path that relative links in a document resolve against.

    Links resolve against the parent of the base. An index document sits
    inside the directory its URL path names, so its base is one level deeper.
    """
    stem = posixpath.basename(strip_markdown_extension(source_path).rstrip("/"))
    if stem == INDEX_SEGMENT:
        return join_url_path(url_path, INDEX_SEGMENT)
    return url_path


def _read_header(path: Path) -> str:
    """Read lines up to and including the closing front matter delimiter."""
    boundary = YAMLHandler.FM_BOUNDARY
    with path.open(encoding="utf-8") as f:
        first = f.readline()
        lines = [first]
        if not boundary.match(first):
            return first
        for line in f:
            lines.append(line)
            if boundary.match(line):
                break
    return "".join(lines)


def _json_safe(value: Any) -> Any:
    """Convert YAML scalars that JSON can't represent (dates) to strings."""
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_json_safe(v) for v in value]
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
