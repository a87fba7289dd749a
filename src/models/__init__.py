# Data models for tubescout
from .video import (
    SearchRequest,
    SearchQuery,
    SearchHit,
    SearchPage,
    VideoDetail,
    VideoRecord,
)
from .credential import Credential, CredentialSnapshot

__all__ = [
    "SearchRequest",
    "SearchQuery",
    "SearchHit",
    "SearchPage",
    "VideoDetail",
    "VideoRecord",
    # Credential pool
    "Credential",
    "CredentialSnapshot",
]
