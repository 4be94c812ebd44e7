"""Static build: resolve every page and write it as JSON.

Output layout:
    out/
    ├── pages/
    │   ├── index.json              # Root page
    │   └── guides/
    │       └── deploy.json         # URL path "guides/deploy"
    ├── navigation.json             # Full nav tree and version
    └── paths.json                  # Static path segments
"""

import json
import logging
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from docshelf.core.context import BuildContext
from docshelf.core.paths import url_path_from_segments
from docshelf.core.types import URLPath

logger = logging.getLogger(__name__)

ROOT_PAGE_NAME = "index"
PAGES_DIRNAME = "pages"
NAVIGATION_FILENAME = "navigation.json"
PATHS_FILENAME = "paths.json"
STAGING_PREFIX = ".docshelf-build-"


@dataclass
class BuildResult:
    """Summary of a completed build."""

    output_dir: Path
    pages: list[Path]


def page_output_path(pages_dir: Path, url_path: str) -> Path:
    """Output file for a URL path; the root page is index.json."""
    return pages_dir / f"{url_path or ROOT_PAGE_NAME}.json"


def build_site(context: BuildContext, output_dir: Path, *, jobs: int = 1) -> BuildResult:
    """Resolve every static path and write the pages.

    Warms the context up first; page resolution then runs on up to ``jobs``
    threads. Everything is written to a staging directory next to
    ``output_dir`` and moved into place only once every page succeeded, so
    a failed build leaves the previous output untouched.

    Args:
        context: Build context for the content directory
        output_dir: Directory to write JSON files to
        jobs: Number of worker threads

    Returns:
        BuildResult listing the written page files

    Raises:
        DocshelfError: If any page fails to resolve
    """
    context.warm_up()

    url_paths = [url_path_from_segments(segments) for segments in context.static_paths()]
    logger.info(f"Building {len(url_paths)} pages into {output_dir} with {jobs} job(s)")

    output_dir.parent.mkdir(parents=True, exist_ok=True)
    staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=output_dir.parent))
    try:
        _write_outputs(context, staging_dir, url_paths, jobs)
        _publish(staging_dir, output_dir)
    finally:
        shutil.rmtree(staging_dir, ignore_errors=True)

    pages_dir = output_dir / PAGES_DIRNAME
    return BuildResult(
        output_dir=output_dir,
        pages=[page_output_path(pages_dir, url_path) for url_path in url_paths],
    )


def _write_outputs(
    context: BuildContext,
    target_dir: Path,
    url_paths: list[URLPath],
    jobs: int,
) -> None:
    pages_dir = target_dir / PAGES_DIRNAME
    pages_dir.mkdir()

    def write_page(url_path: str) -> None:
        page = context.resolve_path(url_path)
        target = page_output_path(pages_dir, url_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(page.to_dict(), ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Wrote {target}")

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            list(executor.map(write_page, url_paths))
    else:
        for url_path in url_paths:
            write_page(url_path)

    navigation = {"items": context.navigation.to_dict(), "version": context.version}
    (target_dir / NAVIGATION_FILENAME).write_text(
        json.dumps(navigation, ensure_ascii=False),
        encoding="utf-8",
    )
    (target_dir / PATHS_FILENAME).write_text(
        json.dumps({"paths": context.static_paths()}, ensure_ascii=False),
        encoding="utf-8",
    )


def _publish(staging_dir: Path, output_dir: Path) -> None:
    """Replace the build outputs in output_dir with the staged ones."""
    output_dir.mkdir(parents=True, exist_ok=True)
    pages_dir = output_dir / PAGES_DIRNAME
    if pages_dir.exists():
        shutil.rmtree(pages_dir)
    for name in (PAGES_DIRNAME, NAVIGATION_FILENAME, PATHS_FILENAME):
        (staging_dir / name).replace(output_dir / name)
