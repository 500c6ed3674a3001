"""Post listing: draft detection, slugs and publication order.

A post lives at ``<section>/<slug>/post.md``. Posts under ``drafts/`` are
drafts; their public slug is a one-way hash of the file path so the URL
cannot be guessed from the title.
"""

from __future__ import annotations

import datetime as dt
import email.utils
import math
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Optional

from .config import is_development, resolve_mode
from .content import RawPost
from .utils import hash_text

DRAFTS_DIR = "drafts"
# Non-ISO spellings commonly written in front matter, read as UTC.
LOOSE_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
)


@dataclass
class Post:
    title: str
    author: str
    slug: str
    preview: str
    timestamp: float
    draft: bool
    date: str
    content: str
    file: str
    icon: Optional[str] = None
    emoji: Optional[str] = None


def _parts(file_path: str) -> tuple[str, ...]:
    return PurePosixPath(file_path.replace("\\", "/")).parts


def is_draft(file_path: str) -> bool:
    parts = _parts(file_path)
    return len(parts) >= 3 and parts[-3] == DRAFTS_DIR


def slug_for(file_path: str) -> str:
    parts = _parts(file_path)
    return parts[-2] if len(parts) >= 2 else ""


def obfuscated_path(file_path: str) -> str:
    return f"draft-{hash_text(file_path)}"


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def parse_moment(value: object) -> Optional[dt.datetime]:
    if isinstance(value, dt.datetime):
        return _as_utc(value)
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time(), tzinfo=dt.timezone.utc)
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None
    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return _as_utc(dt.datetime.fromisoformat(iso))
    except ValueError:
        pass
    try:
        return _as_utc(email.utils.parsedate_to_datetime(raw))
    except (TypeError, ValueError, IndexError, OverflowError):
        pass
    for fmt in LOOSE_DATE_FORMATS:
        try:
            return _as_utc(dt.datetime.strptime(raw, fmt))
        except ValueError:
            continue
    return None


def parse_timestamp(value: object) -> float:
    """Epoch milliseconds for a front-matter date, ``NaN`` when unparsable."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    moment = parse_moment(value)
    if moment is None:
        return math.nan
    return moment.timestamp() * 1000


def _date_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)


def _optional(meta: dict, key: str) -> Optional[str]:
    value = meta.get(key)
    return None if value is None else str(value)


def to_post(record: RawPost, obfuscate: bool) -> Post:
    meta = record.frontmatter or {}
    return Post(
        title=str(meta.get("title") or ""),
        author=str(meta.get("author") or ""),
        slug=obfuscated_path(record.file_path) if obfuscate else slug_for(record.file_path),
        preview=str(meta.get("preview") or ""),
        timestamp=parse_timestamp(meta.get("date")),
        draft=is_draft(record.file_path),
        date=_date_text(meta.get("date")),
        content=record.content,
        file=record.file_path,
        icon=_optional(meta, "icon"),
        emoji=_optional(meta, "emoji"),
    )


def newest_first(posts: Iterable[Post]) -> list[Post]:
    # Stable: equal timestamps keep input order; undated posts go last.
    def key(post: Post) -> tuple[bool, float]:
        if math.isnan(post.timestamp):
            return True, 0.0
        return False, -post.timestamp

    return sorted(posts, key=key)


def _titled(records: Iterable[RawPost]) -> list[RawPost]:
    return [record for record in records if (record.frontmatter or {}).get("title")]


def published(records: Iterable[RawPost], mode: Optional[str] = None) -> list[Post]:
    """Posts to list on the site, newest first.

    In development drafts are listed too, under obfuscated slugs; otherwise
    they are left out.
    """
    development = is_development(mode if mode is not None else resolve_mode())
    posts = [
        to_post(record, obfuscate=development and is_draft(record.file_path))
        for record in _titled(records)
    ]
    return newest_first(post for post in posts if development or not post.draft)


def drafted(records: Iterable[RawPost]) -> list[Post]:
    posts = [to_post(record, obfuscate=True) for record in _titled(records)]
    return newest_first(post for post in posts if post.draft)
