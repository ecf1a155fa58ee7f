"""
Pytest configuration for Video Discovery tests.
"""

import os
import sys

# Set test environment variables BEFORE any imports
os.environ['LOG_LEVEL'] = 'DEBUG'
os.environ.pop('EMBED_HOSTS', None)
os.environ.pop('BACKGROUND_SCAN_LIMIT', None)

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from video_discovery.document import Document


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def make_document():
    """Build a document from a body fragment or a full page."""
    def _make(markup: str, url: str = 'https://example.com/watch/page.html') -> Document:
        return Document.from_html(markup, url=url)
    return _make


@pytest.fixture
def sample_page(make_document):
    """Page with one of every kind of video source."""
    return make_document("""
    <html>
      <head>
        <title>Sample Page</title>
        <style>.hero { background-image: url("/media/loop.webm"); }</style>
      </head>
      <body>
        <section>
          <h2>Conference Keynote</h2>
          <video src="/videos/keynote.mp4" data-video-width="1920"
                 data-video-height="1080" data-duration="125.4">
            <source src="/videos/keynote.webm" type="video/webm">
          </video>
        </section>
        <iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe>
        <iframe src="https://ads.example.net/banner"></iframe>
        <div class="hero"></div>
        <script>var hls = "https://cdn.example.com/live/master.m3u8?token=x";</script>
        <script>var dash = "https://cdn.example.com/vod/manifest.mpd";</script>
      </body>
    </html>
    """)
