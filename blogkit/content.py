from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml

POST_GLOB = "**/post.md"


@dataclass
class RawPost:
    frontmatter: dict = field(default_factory=dict)
    content: str = ""
    file_path: str = ""


def parse_front_matter(text: str, source: str = "<string>") -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    body = "\n".join(lines[end + 1 :])
    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as exc:
        print(f"Invalid front matter in {source}: {exc}", file=sys.stderr)
        return {}, body
    if not isinstance(meta, dict):
        return {}, body
    return meta, body


def read_post(path: Path) -> RawPost:
    meta, body = parse_front_matter(path.read_text(encoding="utf-8"), source=str(path))
    return RawPost(frontmatter=meta, content=body, file_path=path.as_posix())


def load_posts(content_dir: Path, pattern: str = POST_GLOB) -> list[RawPost]:
    """Read every ``post.md`` under ``content_dir``, sorted by path.

    Posts live in ``<section>/<slug>/post.md``; drafts in
    ``drafts/<slug>/post.md``.
    """
    if not content_dir.exists():
        print(f"Content directory not found: {content_dir}", file=sys.stderr)
        return []
    files = sorted(content_dir.glob(pattern), key=lambda p: p.as_posix())
    return [read_post(path) for path in files if path.is_file()]
