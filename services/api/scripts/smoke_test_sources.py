#!/usr/bin/env python3
"""Quick smoke test for feed sources.

Usage (from repo root, after `pip install -e .`):
  python services/api/scripts/smoke_test_sources.py --source "BBC News" --show 3

This script performs live HTTP requests.
"""

from __future__ import annotations

import argparse
import asyncio

import httpx

from newswire.config import settings
from newswire.sources import list_source_names, get_parser


async def _fetch(source_name: str):
    parser = get_parser(source_name)
    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
        follow_redirects=True,
    ) as client:
        return await parser.fetch_items(client)


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--source", default="BBC News", help="Exact source name from the registry")
    ap.add_argument("--show", type=int, default=3, help="How many items to print")
    args = ap.parse_args()

    if args.source not in list_source_names():
        print("Unknown source. Available:")
        for n in list_source_names():
            print(" -", n)
        return 2

    parser = get_parser(args.source)
    print(f"Source: {parser.config.name} ({parser.config.category})")
    print(f"Feed URL: {parser.config.url}")

    items = asyncio.run(_fetch(args.source))
    print(f"Fetched items: {len(items)}")

    for i, it in enumerate(items[: max(0, args.show)], 1):
        print("\n---")
        print(f"#{i}: {it.title}")
        print(it.link)
        print(f"id={it.id}")
        print(f"pubDate={it.pub_date} image={it.image_url or '-'}")
        print(f"content_len={len(it.body)}")

        # basic quality checks
        if not it.title:
            print("[WARN] empty title; id will collide with other untitled items")
        if not it.image_url:
            print("[WARN] no image found")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
