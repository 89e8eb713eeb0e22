from itera.clients.ai_client import AiClient
from itera.clients.kv_store import FileStore, KeyValueStoreProtocol, MemoryStore

__all__ = [
    "AiClient",
    "FileStore",
    "KeyValueStoreProtocol",
    "MemoryStore",
]
