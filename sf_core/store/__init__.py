"""
StockFlow 实体存储
"""
from typing import Optional

from sf_core.config import Settings, get_settings
from .base import EntityStore, EntityType, Record
from .memory import MemoryEntityStore
from .json_file import JsonFileEntityStore


def create_store(settings: Optional[Settings] = None) -> EntityStore:
    """根据配置创建实体存储"""
    settings = settings or get_settings()

    if settings.store_backend == "memory":
        return MemoryEntityStore()

    if settings.store_backend == "database":
        from sf_core.database import DatabaseManager
        from .database import DatabaseEntityStore
        return DatabaseEntityStore(DatabaseManager(settings))

    return JsonFileEntityStore(settings.data_dir)


__all__ = [
    "EntityStore",
    "EntityType",
    "Record",
    "MemoryEntityStore",
    "JsonFileEntityStore",
    "create_store",
]
