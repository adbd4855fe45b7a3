"""
JSON 文件实体存储

每类实体一个文件（products.json、warehouses.json、stock.json、
transfers.json、alerts.json），内容为格式化的 JSON 数组。
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Union

from sf_core.utils.errors import PersistenceError
from .base import EntityStore, EntityType, Record


class JsonFileEntityStore(EntityStore):
    """基于目录的 JSON 文件存储"""

    def __init__(self, data_dir: Union[str, Path]):
        super().__init__()
        self.data_dir = Path(data_dir)

    def path_for(self, entity_type: EntityType) -> Path:
        """实体类型对应的文件路径"""
        return self.data_dir / f"{EntityType(entity_type).value}.json"

    async def _read(self, entity_type: EntityType) -> List[Record]:
        return await asyncio.to_thread(self._read_file, self.path_for(entity_type))

    async def _write_many(self, collections: Dict[EntityType, List[Record]]) -> None:
        await asyncio.to_thread(self._write_files, collections)

    def _read_file(self, path: Path) -> List[Record]:
        # 文件不存在视为空集合
        if not path.exists():
            return []

        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise PersistenceError(
                code="STORE_CORRUPTED",
                detail=f"{path.name} does not contain a JSON array"
            )
        return data

    def _write_files(self, collections: Dict[EntityType, List[Record]]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # 先把所有集合写入临时文件，全部成功后再逐个替换
        staged = []
        try:
            for entity_type, records in collections.items():
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.data_dir,
                    prefix=f".{entity_type.value}.",
                    suffix=".tmp"
                )
                staged.append((tmp_name, self.path_for(entity_type)))
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                    f.write("\n")
        except Exception:
            for tmp_name, _ in staged:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
            raise

        for tmp_name, target in staged:
            os.replace(tmp_name, target)

        self.logger.debug(
            "Wrote entity collections",
            entity_types=[t.value for t in collections],
            data_dir=str(self.data_dir)
        )
