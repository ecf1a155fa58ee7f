"""
Tests for the URL classifier.
"""

import pytest

from video_discovery.url_classifier import (
    classify_format, is_embed_host, is_valid_downloadable, looks_like_video
)
from video_discovery.config import DEFAULT_EMBED_HOSTS


class TestClassifyFormat:
    """Tests for classify_format()"""

    @pytest.mark.parametrize('url,expected', [
        ('https://host/clip.mp4', 'mp4'),
        ('https://host/clip.WEBM', 'webm'),
        ('https://host/clip.mkv?download=1', 'mkv'),
        ('https://host/movie.m4v', 'm4v'),
        ('/relative/old.avi', 'avi'),
    ])
    def test_container_extensions(self, url, expected):
        assert classify_format(url) == expected

    def test_hls_manifest(self):
        assert classify_format('https://cdn.example.com/a/b/master.m3u8?token=x') == 'HLS'

    def test_dash_manifest(self):
        assert classify_format('https://cdn.example.com/vod/manifest.mpd') == 'DASH'

    def test_manifest_marker_in_middle_of_url(self):
        """Manifest markers count anywhere in the URL"""
        assert classify_format('https://cdn.example.com/index.m3u8/segment') == 'HLS'

    def test_defaults_to_mp4(self):
        assert classify_format('https://www.youtube.com/embed/dQw4w9WgXcQ') == 'mp4'
        assert classify_format('https://host/page.html') == 'mp4'

    @pytest.mark.parametrize('url', ['', None, 42, 'not a url at all', ':::///'])
    def test_never_fails(self, url):
        assert classify_format(url) == 'mp4'


class TestLooksLikeVideo:
    """Tests for looks_like_video()"""

    def test_extension_match(self):
        assert looks_like_video('https://host/a/loop.webm') is True
        assert looks_like_video('https://host/playlist.m3u8') is True

    def test_extension_before_query(self):
        assert looks_like_video('https://host/get?format=mp4?x') is True

    @pytest.mark.parametrize('url', [
        'https://host/video/12345',
        'https://host/live/stream',
        'https://media.host.com/asset/9',
    ])
    def test_token_match(self, url):
        assert looks_like_video(url) is True

    def test_case_insensitive(self):
        assert looks_like_video('https://host/CLIP.MP4') is True

    def test_plain_image_rejected(self):
        assert looks_like_video('https://host/images/hero.jpg') is False

    def test_empty_rejected(self):
        assert looks_like_video('') is False
        assert looks_like_video(None) is False


class TestIsValidDownloadable:
    """Tests for is_valid_downloadable()"""

    def test_rejects_ftp(self):
        assert is_valid_downloadable('ftp://host/video.mp4') is False

    def test_accepts_https_stream(self):
        assert is_valid_downloadable('https://host/stream/video.mp4') is True

    def test_accepts_https_webm(self):
        assert is_valid_downloadable('https://host/clip.webm') is True

    def test_rejects_blob_and_data(self):
        assert is_valid_downloadable('blob:https://host/0f1e-uuid') is False
        assert is_valid_downloadable('data:video/mp4;base64,AAAA') is False

    def test_rejects_non_video_http(self):
        assert is_valid_downloadable('https://host/index.html') is False

    def test_rejects_malformed(self):
        assert is_valid_downloadable('http://[::1') is False
        assert is_valid_downloadable(None) is False


class TestIsEmbedHost:
    """Tests for is_embed_host()"""

    @pytest.mark.parametrize('url', [
        'https://www.youtube.com/embed/dQw4w9WgXcQ',
        'https://youtu.be/dQw4w9WgXcQ',
        'https://player.vimeo.com/video/123456789',
        'https://www.tiktok.com/embed/v2/1',
    ])
    def test_known_hosts(self, url):
        assert is_embed_host(url, DEFAULT_EMBED_HOSTS) is True

    def test_lookalike_host_rejected(self):
        assert is_embed_host('https://notyoutube.com/embed/x', DEFAULT_EMBED_HOSTS) is False

    def test_host_in_path_rejected(self):
        assert is_embed_host('https://evil.example/youtube.com/x', DEFAULT_EMBED_HOSTS) is False

    def test_empty(self):
        assert is_embed_host('', DEFAULT_EMBED_HOSTS) is False
