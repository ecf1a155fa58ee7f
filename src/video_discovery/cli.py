"""
CLI - Video Discovery

Runs one detection over a local HTML file or a live page and prints the
discovered videos.

Usage:
    video-discovery page.html
    video-discovery https://example.com/watch --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import BROWSER_HEADLESS, LOG_LEVEL
from .document import Document
from .errors import DiscoveryError
from .models import VideoRecord
from .session import DiscoverySession
from .url_classifier import is_valid_downloadable

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='video-discovery',
        description="Discover embedded videos in a page",
    )
    parser.add_argument("target", help="HTML file path or http(s) URL")
    parser.add_argument("--base-url", help="Base URL for relative links in a local file")
    parser.add_argument("--json", action="store_true", help="Print records as JSON")
    parser.add_argument("--valid-only", action="store_true",
                        help="Only list records the downloader would accept")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    return parser


async def load_document(target: str, base_url: Optional[str] = None,
                        headless: bool = BROWSER_HEADLESS) -> Document:
    """
    Load a document from a URL (rendered in Chromium) or a local file.

    Raises:
        DiscoveryError: If the target cannot be loaded
    """
    if target.startswith(('http://', 'https://')):
        from .crawler import BrowserManager, PageLoader

        browser = BrowserManager(headless=headless)
        try:
            return await PageLoader(browser).load(target)
        finally:
            await browser.cleanup_all()

    path = Path(target)
    try:
        markup = path.read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        raise DiscoveryError(f"Cannot read {target}: {e}")

    return Document.from_html(markup, url=base_url or path.resolve().as_uri())


def format_table(videos: List[VideoRecord]) -> str:
    """Plain-text listing, one video per line."""
    if not videos:
        return "No videos found"

    lines = []
    for video in videos:
        lines.append(
            f"{video.id:>3}  {video.format:<5} {video.quality:<9} {video.duration:>7}  "
            f"{video.size_label:>12}  {video.title}"
        )
        lines.append(f"     {video.url}")
    return '\n'.join(lines)


async def run(args) -> int:
    document = await load_document(args.target, args.base_url, headless=not args.headed)

    session = DiscoverySession(document, watch=False)
    videos = await session.start_detection()

    if args.valid_only:
        videos = [video for video in videos if is_valid_downloadable(video.url)]

    if args.json:
        print(json.dumps([video.to_dict() for video in videos], indent=2))
    else:
        print(format_table(videos))

    await session.teardown()
    return 0


def main(argv=None):
    """Main entry point."""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )

    args = build_parser().parse_args(argv)

    try:
        code = asyncio.run(run(args))
    except DiscoveryError as e:
        logger.error(str(e))
        code = 1

    sys.exit(code)


if __name__ == '__main__':
    main()
