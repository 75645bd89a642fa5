"""Services package"""
from .extractor_service import Extractor, ResolvedMedia, YtDlpExtractor
from .fetch_service import FetchCoordinator, FetchResult
from .store_service import StoreManager

__all__ = [
    "Extractor",
    "ResolvedMedia",
    "YtDlpExtractor",
    "FetchCoordinator",
    "FetchResult",
    "StoreManager"
]
