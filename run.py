#!/usr/bin/env python3
"""
Run Video Discovery

Usage:
    python run.py page.html
    python run.py https://example.com/watch --json
"""

import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from video_discovery.cli import main

if __name__ == '__main__':
    main()
