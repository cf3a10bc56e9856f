import asyncio
import json
import logging
import os
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ..schemas.pydantic.resume_analysis import AnalysisResult, SharedRecord
from .exceptions import SharedAnalysisNotFoundError, ShareStoreError

logger = logging.getLogger(__name__)


def new_share_id() -> str:
    return uuid.uuid4().hex


class ShareStore(ABC):
    """
    Keyed persistence for shared analyses.

    Records are written once and never updated; there is no listing and no
    expiry.
    """

    @abstractmethod
    async def _put(self, record: SharedRecord) -> None: ...

    @abstractmethod
    async def _get(self, analysis_id: str) -> SharedRecord: ...

    async def save(self, result: AnalysisResult) -> str:
        record = SharedRecord(id=new_share_id(), result=result)
        await self._put(record)
        logger.info(f"Saved shared analysis {record.id}")
        return record.id

    async def load_record(self, analysis_id: str) -> SharedRecord:
        return await self._get(analysis_id)

    async def load(self, analysis_id: str) -> AnalysisResult:
        record = await self._get(analysis_id)
        return record.result


class InMemoryShareStore(ShareStore):
    def __init__(self) -> None:
        self._records: Dict[str, SharedRecord] = {}

    async def _put(self, record: SharedRecord) -> None:
        self._records[record.id] = record

    async def _get(self, analysis_id: str) -> SharedRecord:
        try:
            return self._records[analysis_id]
        except KeyError:
            raise SharedAnalysisNotFoundError(analysis_id=analysis_id) from None


class JsonFileShareStore(ShareStore):
    """
    Stores every shared analysis in a single JSON document.

    Writes go to a temporary file that replaces the document atomically, so a
    crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> Dict[str, dict]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read share store {self._path}: {e}")
            raise ShareStoreError("Share store could not be read.", path=str(self._path)) from e
        if not isinstance(data, dict):
            raise ShareStoreError("Share store is corrupt.", path=str(self._path))
        return data

    def _write_all(self, data: Dict[str, dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".shared-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as e:
            logger.error(f"Could not write share store {self._path}: {e}")
            Path(tmp_name).unlink(missing_ok=True)
            raise ShareStoreError("Share store could not be written.", path=str(self._path)) from e

    def _put_sync(self, record: SharedRecord) -> None:
        data = self._read_all()
        data[record.id] = record.model_dump(mode="json", by_alias=True)
        self._write_all(data)

    def _get_sync(self, analysis_id: str) -> SharedRecord:
        raw = self._read_all().get(analysis_id)
        if raw is None:
            raise SharedAnalysisNotFoundError(analysis_id=analysis_id)
        try:
            return SharedRecord.model_validate(raw)
        except ValidationError as e:
            raise ShareStoreError(f"Stored analysis {analysis_id} is invalid.", path=str(self._path)) from e

    async def _put(self, record: SharedRecord) -> None:
        async with self._lock:
            await run_in_threadpool(self._put_sync, record)

    async def _get(self, analysis_id: str) -> SharedRecord:
        return await run_in_threadpool(self._get_sync, analysis_id)


def build_share_store(kind: str, path: str) -> ShareStore:
    match kind:
        case "file":
            return JsonFileShareStore(path)
        case "memory":
            return InMemoryShareStore()
        case _:
            raise ValueError(f"Unknown share store backend: {kind}")
