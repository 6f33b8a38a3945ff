"""
Document Repository - Base for JSON document collections on top of StorageInterface.
Each document is a pydantic model dumped as JSON (snake_case keys).
"""

import json
import logging
from typing import Optional, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .interface import StorageInterface, StorageError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class DocumentRepository:
    """
    Shared load/save helpers for repositories.
    Unreadable or invalid documents raise StorageError instead of being skipped.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage

    async def _load_model(self, path: str, model_cls: Type[M]) -> Optional[M]:
        content = await self.storage.load(path)
        if content is None:
            return None
        try:
            return model_cls.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"Invalid document at {path}: {e}")
            raise StorageError(f"Invalid document at {path}", path=path) from e

    async def _save_model(self, path: str, model: BaseModel) -> None:
        await self.storage.save(path, model.model_dump_json(indent=2))

    async def _load_all(self, directory: str, model_cls: Type[M], recursive: bool = False) -> List[M]:
        files = await self.storage.list(directory, pattern="*.json", recursive=recursive)
        documents = []
        for file_path in files:
            document = await self._load_model(file_path, model_cls)
            if document is not None:
                documents.append(document)
        return documents

    async def _load_json(self, path: str, default):
        """Load a plain JSON value (used for indexes)."""
        content = await self.storage.load(path)
        if content is None:
            return default
        try:
            return json.loads(content.decode('utf-8'))
        except ValueError as e:
            logger.error(f"Invalid JSON at {path}: {e}")
            raise StorageError(f"Invalid JSON at {path}", path=path) from e

    async def _save_json(self, path: str, value) -> None:
        await self.storage.save(path, json.dumps(value, indent=2, ensure_ascii=False))
