"""pyraksha - Async client for the Raksha Sahayak safety backend with offline sync."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyraksha")
except PackageNotFoundError:
    __version__ = "0+local"
from pyraksha.cache import AiohttpFetcher, AssetCacheController, CacheStorage, WorkerState
from pyraksha.client import RakshaClient
from pyraksha.config import RakshaConfig
from pyraksha.emergency import LongPressTrigger
from pyraksha.exceptions import (
    RakshaApiError,
    RakshaCacheError,
    RakshaConfigError,
    RakshaError,
    RakshaRecommendationError,
    RakshaStorageError,
    RakshaTransportError,
    RakshaValidationError,
)
from pyraksha.models import (
    EmergencyAlert,
    EmergencyAlertCreate,
    FamilyMember,
    Incident,
    IncidentCreate,
    MutationKind,
    MutationQueueSnapshot,
    OfflineReceipt,
    SafetyRecommendation,
    StatusUpdate,
    UserRecord,
)
from pyraksha.offline import (
    ConnectivityMonitor,
    ConnectivityTransition,
    DrainOutcome,
    JsonFileStore,
    MemoryStore,
    MutationQueue,
    ReplayEngine,
    SnapshotStore,
)
from pyraksha.recommendations import GeminiBackend, RecommendationService

__all__ = [
    "__version__",
    "AiohttpFetcher",
    "AssetCacheController",
    "CacheStorage",
    "ConnectivityMonitor",
    "ConnectivityTransition",
    "DrainOutcome",
    "EmergencyAlert",
    "EmergencyAlertCreate",
    "FamilyMember",
    "GeminiBackend",
    "Incident",
    "IncidentCreate",
    "JsonFileStore",
    "LongPressTrigger",
    "MemoryStore",
    "MutationKind",
    "MutationQueue",
    "MutationQueueSnapshot",
    "OfflineReceipt",
    "RakshaApiError",
    "RakshaCacheError",
    "RakshaClient",
    "RakshaConfig",
    "RakshaConfigError",
    "RakshaError",
    "RakshaRecommendationError",
    "RakshaStorageError",
    "RakshaTransportError",
    "RakshaValidationError",
    "RecommendationService",
    "ReplayEngine",
    "SafetyRecommendation",
    "SnapshotStore",
    "StatusUpdate",
    "UserRecord",
    "WorkerState",
]
