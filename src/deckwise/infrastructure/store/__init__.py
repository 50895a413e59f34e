# Storage adapters
from .memory import InMemoryCardRepository, InMemoryReviewRepository, InMemorySessionRepository
from .yaml_store import YamlStore

__all__ = [
    "InMemoryCardRepository",
    "InMemoryReviewRepository",
    "InMemorySessionRepository",
    "YamlStore",
]
