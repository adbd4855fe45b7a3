"""
数据库实体存储

集合整体替换在一个事务中完成：先删除该类型的旧行，再按顺序插入新行。
write_batch 的多个集合共享同一个事务。
"""
from typing import Dict, List, Optional

from sqlalchemy import delete, select, insert

from sf_core.database import DatabaseManager
from sf_core.models.entity_record import EntityRecordRow
from .base import EntityStore, EntityType, Record


class DatabaseEntityStore(EntityStore):
    """基于 SQLAlchemy 的实体存储"""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        super().__init__()
        self.db_manager = db_manager or DatabaseManager()

    async def create_schema(self) -> None:
        """创建存储表（正式环境请使用 Alembic 迁移）"""
        await self.db_manager.create_tables()

    async def _read(self, entity_type: EntityType) -> List[Record]:
        async with self.db_manager.get_session() as session:
            stmt = (
                select(EntityRecordRow.payload)
                .where(EntityRecordRow.entity_type == entity_type.value)
                .order_by(EntityRecordRow.position)
            )
            result = await session.execute(stmt)
            return [dict(payload) for payload in result.scalars().all()]

    async def _write_many(self, collections: Dict[EntityType, List[Record]]) -> None:
        async with self.db_manager.get_transaction() as session:
            for entity_type, records in collections.items():
                await session.execute(
                    delete(EntityRecordRow).where(EntityRecordRow.entity_type == entity_type.value)
                )
                if records:
                    await session.execute(
                        insert(EntityRecordRow),
                        [
                            {"entity_type": entity_type.value, "position": i, "payload": record}
                            for i, record in enumerate(records)
                        ]
                    )

        self.logger.debug(
            "Replaced entity collections",
            entity_types=[t.value for t in collections]
        )

    async def close(self) -> None:
        await self.db_manager.close()
