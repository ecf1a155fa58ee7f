"""
Configuration - Video Discovery

Loads environment variables and engine configuration.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Detection settings
DEBOUNCE_MS = int(os.getenv('DEBOUNCE_MS', '500'))  # Mutation re-scan delay
TITLE_MAX_LENGTH = int(os.getenv('TITLE_MAX_LENGTH', '50'))

# Upper bound on elements inspected by the background-media scan (0 = unbounded)
BACKGROUND_SCAN_LIMIT = int(os.getenv('BACKGROUND_SCAN_LIMIT', '5000'))

# Frame-embed hosts treated as video players
DEFAULT_EMBED_HOSTS = (
    'youtube.com', 'youtu.be', 'youtube-nocookie.com', 'vimeo.com',
    'dailymotion.com', 'twitch.tv', 'facebook.com', 'instagram.com',
    'tiktok.com',
)
EMBED_HOSTS = tuple(
    host.strip().lower()
    for host in os.getenv('EMBED_HOSTS', ','.join(DEFAULT_EMBED_HOSTS)).split(',')
    if host.strip()
)

# Playwright / Crawler settings
BROWSER_HEADLESS = os.getenv('BROWSER_HEADLESS', 'true').lower() == 'true'
BROWSER_TIMEOUT = int(os.getenv('BROWSER_TIMEOUT', '30000'))  # 30 seconds

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
