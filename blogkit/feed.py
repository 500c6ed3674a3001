from __future__ import annotations

import html
from typing import Iterable, Optional

from .content import RawPost
from .posts import Post, parse_moment, published
from .utils import join_url, rfc822_date

RSS_TITLE = "Simple Blog RSS"
RSS_DESCRIPTION = "Simple Blog RSS Feed"
RSS_CUSTOM_DATA = "<language>en-us</language>"
DEFAULT_STYLESHEET = "/rss/styles.xsl"


def feed_item(post: Post) -> dict:
    return {
        "title": post.title,
        "description": post.preview,
        "link": post.slug,
        "pubDate": post.date,
    }


def get_rss(
    records: Iterable[RawPost],
    mode: Optional[str] = None,
    title: str = RSS_TITLE,
    description: str = RSS_DESCRIPTION,
) -> dict:
    return {
        "title": title,
        "description": description,
        "stylesheet": True,
        "customData": RSS_CUSTOM_DATA,
        "items": [feed_item(post) for post in published(records, mode=mode)],
    }


def pub_date(value: str) -> str:
    moment = parse_moment(value)
    if moment is None:
        return value
    return rfc822_date(moment)


def render_rss(feed: dict, site_url: str = "") -> str:
    site_url = site_url.rstrip("/")
    items = []
    for item in feed.get("items", []):
        link = join_url(site_url, item["link"]) if site_url else item["link"]
        parts = [
            "<item>",
            f"<title>{html.escape(item['title'])}</title>",
            f"<link>{html.escape(link)}</link>",
            f"<guid>{html.escape(link)}</guid>",
        ]
        if item.get("pubDate"):
            parts.append(f"<pubDate>{html.escape(pub_date(item['pubDate']))}</pubDate>")
        parts.append(f"<description>{html.escape(item['description'])}</description>")
        parts.append("</item>")
        items.append("\n".join(parts))

    head = ['<?xml version="1.0" encoding="UTF-8"?>']
    stylesheet = feed.get("stylesheet")
    if stylesheet:
        href = DEFAULT_STYLESHEET if stylesheet is True else str(stylesheet)
        head.append(f'<?xml-stylesheet href="{html.escape(href)}" type="text/xsl"?>')
    channel = [
        "<channel>",
        f"<title>{html.escape(feed.get('title', ''))}</title>",
        f"<link>{html.escape(site_url)}/</link>" if site_url else "<link>/</link>",
        f"<description>{html.escape(feed.get('description', ''))}</description>",
    ]
    if feed.get("customData"):
        channel.append(feed["customData"])
    channel.extend(items)
    channel.append("</channel>")
    return "\n".join(head + ['<rss version="2.0">'] + channel + ["</rss>"])
