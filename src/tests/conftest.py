"""Shared fixtures: a throwaway Git-backed site."""

import shutil
from pathlib import Path

import pytest

CMS_CONFIG = """\
collections:
  - name: posts
    folder: content/posts
    fields:
      - {name: title, widget: string}
      - {name: draft, widget: boolean, default: false}
      - {name: tags, widget: list}
      - {name: body, widget: markdown, default: "Write here"}
  - name: pages
    folder: content/pages
    fields:
      - {name: title, widget: string}
"""

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


def write(root: Path, path: str, content: str) -> Path:
    full = root / path
    full.parent.mkdir(parents=True, exist_ok=True)
    full.write_text(content, encoding="utf-8")
    return full


@pytest.fixture
def git_site(tmp_path):
    """A repository with two committed posts, a page and a CMS config."""
    from git import Repo

    repo = Repo.init(tmp_path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test")
        cw.set_value("user", "email", "test@example.com")

    files = {
        "static/admin/config.yml": CMS_CONFIG,
        "content/posts/first.md": "---\ntitle: First\ndraft: false\n---\n\nHello\n",
        "content/posts/second.md": '+++\ntitle = "Second"\n+++\n\nWorld\n',
        "content/pages/about.md": "---\ntitle: About\n---\n\nAbout us\n",
    }
    for path, content in files.items():
        write(tmp_path, path, content)
    repo.index.add([str(tmp_path / path) for path in files])
    repo.index.commit("Initial content")

    yield repo
    repo.close()
