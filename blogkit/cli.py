from __future__ import annotations

import argparse
import dataclasses
import json
import math
import sys
from pathlib import Path
from typing import Optional

from .config import load_config, resolve_mode, site_url
from .content import load_posts
from .feed import RSS_DESCRIPTION, RSS_TITLE, get_rss, render_rss
from .markdown_ext import render_markdown
from .pipeline import run_pipeline
from .posts import drafted, published
from .utils import write_text

COMMANDS = ("posts", "drafts", "rss", "transform", "render")


def emit(text: str, output: str) -> None:
    if output and output != "-":
        write_text(Path(output), text)
        print(f"Wrote {output}", file=sys.stderr)
        return
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def posts_json(posts: list) -> str:
    rows = []
    for post in posts:
        row = dataclasses.asdict(post)
        row.pop("content", None)
        # NaN is not valid JSON.
        if math.isnan(row["timestamp"]):
            row["timestamp"] = None
        rows.append(row)
    return json.dumps(rows, indent=2, ensure_ascii=False)


def read_input(source: Optional[str]) -> str:
    if not source or source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        print(f"Input file not found: {path}", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def run_command(args: argparse.Namespace) -> int:
    if args.command in {"posts", "drafts", "rss"}:
        records = load_posts(Path(args.content))
        if args.command == "posts":
            emit(posts_json(published(records, mode=args.mode)), args.output)
        elif args.command == "drafts":
            emit(posts_json(drafted(records)), args.output)
        else:
            feed = get_rss(records, mode=args.mode, title=args.rss_title, description=args.rss_description)
            emit(render_rss(feed, args.site_url), args.output)
        return 0

    raw = read_input(args.input)
    if args.command == "render":
        emit(render_markdown(raw), args.output)
        return 0
    try:
        tree = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON document tree: {exc}", file=sys.stderr)
        return 1
    if not isinstance(tree, dict):
        print("Document tree must be a JSON object.", file=sys.stderr)
        return 1
    emit(json.dumps(run_pipeline(tree), indent=2, ensure_ascii=False), args.output)
    return 0


def build_parser(argv: Optional[list[str]] = None) -> argparse.ArgumentParser:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    parser = argparse.ArgumentParser(description="Blog content pipeline: posts, drafts, RSS and tree rewrites.")
    parser.add_argument("command", choices=COMMANDS, help="What to produce.")
    parser.add_argument("input", nargs="?", help="Input file for transform/render (default: stdin).")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--content", default=cfg_str("content", "src/content"), help="Directory containing posts.")
    parser.add_argument(
        "--mode",
        default=resolve_mode(config),
        help="Execution mode; 'development' lists drafts under obfuscated slugs.",
    )
    parser.add_argument("--site-url", default=site_url(config), help="Public site URL used for RSS links.")
    parser.add_argument("--rss-title", default=cfg_str("rss_title", RSS_TITLE), help="RSS channel title.")
    parser.add_argument(
        "--rss-description",
        default=cfg_str("rss_description", RSS_DESCRIPTION),
        help="RSS channel description.",
    )
    parser.add_argument("--output", default="-", help="Output file (default: stdout).")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser(argv).parse_args(argv)
    return run_command(args)


if __name__ == "__main__":
    sys.exit(main())
