"""Root test configuration: sample site content and session-level cleanup"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = ["_site", "._site.staging", "._site.previous"]


SITE_FILES = {
    "about.md": '---\ntitle: About\npermalink: /about/\nredirect_from: /about.html\n---\nI write about *things*.\n',
    "cv.md": "---\ntitle: CV\n---\nEducation and work.\n",
    "_posts/2024-05-01-first.md": (
        "---\ntitle: First Post\ndate: 2024-05-01\ntags: [ml, notes]\n---\nFirst paragraph.\n\nSecond.\n"
    ),
    "_posts/2025-01-01-hello.md": (
        '---\ntitle: "Hello"\ndate: 2025-01-01\ntags: [ML]\nslug: hello\n---\nHi\n'
    ),
    "_portfolio/project-one.md": "---\ntitle: Project One\nvenue: Lab\n---\nA project.\n",
}


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove output directories created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(name="write_files")
def write_files_fixture():
    """Write {relative_path: text} under a root directory and return the root."""
    def _write(root: Path, files: dict[str, str]) -> Path:
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root
    return _write


@pytest.fixture(name="site_root")
def site_root_fixture(tmp_path, write_files):
    """A small content tree: two pages, two posts, one portfolio entry."""
    return write_files(tmp_path / "content", SITE_FILES)
