"""
实体集合存储表

每条实体记录一行，payload 保存原始 camelCase 记录，
position 保留集合内顺序（整集合覆盖写入）。
"""
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import BigInteger, Integer, String, JSON, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class EntityRecordRow(Base):
    """实体记录表"""
    __tablename__ = "entity_records"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True
    )

    entity_type: Mapped[str] = mapped_column(String(32), nullable=False, comment="实体类型")
    position: Mapped[int] = mapped_column(Integer, nullable=False, comment="集合内顺序")
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, comment="记录内容")

    written_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="写入时间"
    )

    __table_args__ = (
        Index('ix_entity_records_type_position', 'entity_type', 'position'),
    )
