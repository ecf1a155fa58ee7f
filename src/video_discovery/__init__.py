"""Video Discovery - detects and classifies videos embedded in live documents."""

from .document import Document, Element, MutationRecord
from .errors import DiscoveryError, PageLoadError
from .metadata import MetadataSynthesizer
from .models import ElementRef, SourceKind, VideoRecord
from .session import DiscoverySession, SessionState
from .url_classifier import classify_format, is_valid_downloadable, looks_like_video

__version__ = '1.0.0'
