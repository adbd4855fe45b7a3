"""
内存实体存储（测试和演示用）
"""
import copy
from typing import Dict, List, Mapping, Optional, Sequence

from .base import EntityStore, EntityType, Record


class MemoryEntityStore(EntityStore):
    """进程内存储，读写都做深拷贝，调用方拿到的记录与存储互不影响"""

    def __init__(self, initial: Optional[Mapping[EntityType, Sequence[Record]]] = None):
        super().__init__()
        self._collections: Dict[EntityType, List[Record]] = {t: [] for t in EntityType}
        for entity_type, records in (initial or {}).items():
            self._collections[EntityType(entity_type)] = copy.deepcopy(list(records))

    async def _read(self, entity_type: EntityType) -> List[Record]:
        return copy.deepcopy(self._collections[entity_type])

    async def _write_many(self, collections: Dict[EntityType, List[Record]]) -> None:
        for entity_type, records in collections.items():
            self._collections[entity_type] = copy.deepcopy(records)
