"""
Persisted site analyses, keyed by URL.

``InMemorySiteStore`` keeps records for the process lifetime;
``JsonFileSiteStore`` writes one JSON file per URL under a
directory.  Both honour the same ``SiteStore`` protocol so the
orchestrator never cares which is in use.

Store failures raise :class:`StorageError`; the orchestrator turns
them into a warning instead of failing the analysis.
"""

from __future__ import annotations

import hashlib
import json
import os
import pathlib
import threading
from typing import Protocol

import pydantic

from dataguardian.models import site
from dataguardian.utils import errors, logger

log = logger.create_logger("SiteStore")


class SiteStore(Protocol):
    """Keyed upsert/find store for ``AnalysisResult`` records."""

    def is_available(self) -> bool: ...

    def find_by_url(self, url: str) -> site.AnalysisResult | None: ...

    def upsert_by_url(self, url: str, record: site.AnalysisResult) -> site.AnalysisResult: ...

    def list_all(self) -> list[site.AnalysisResult]: ...


def _newest_first(records: list[site.AnalysisResult]) -> list[site.AnalysisResult]:
    return sorted(records, key=lambda r: r.last_analyzed, reverse=True)


class InMemorySiteStore:
    """Process-local store; everything is lost on restart."""

    def __init__(self) -> None:
        self._records: dict[str, site.AnalysisResult] = {}
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return True

    def find_by_url(self, url: str) -> site.AnalysisResult | None:
        with self._lock:
            record = self._records.get(url)
        return record.model_copy(deep=True) if record else None

    def upsert_by_url(self, url: str, record: site.AnalysisResult) -> site.AnalysisResult:
        stored = record.model_copy(update={"url": url}, deep=True)
        with self._lock:
            self._records[url] = stored
        return stored.model_copy(deep=True)

    def list_all(self) -> list[site.AnalysisResult]:
        with self._lock:
            records = [r.model_copy(deep=True) for r in self._records.values()]
        return _newest_first(records)


class JsonFileSiteStore:
    """One ``<md5(url)>.json`` file per site under *directory*.

    Writes go to a temporary file that is then renamed over the
    target, so readers never observe a half-written record.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = pathlib.Path(directory)
        self._lock = threading.Lock()

    @property
    def directory(self) -> pathlib.Path:
        return self._dir

    def _path(self, url: str) -> pathlib.Path:
        digest = hashlib.md5(url.encode("utf-8")).hexdigest()
        return self._dir / f"{digest}.json"

    def is_available(self) -> bool:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log.warn("Store directory unavailable", {"dir": str(self._dir), "error": str(exc)})
            return False
        return os.access(self._dir, os.W_OK)

    def _read(self, path: pathlib.Path) -> site.AnalysisResult:
        try:
            return site.AnalysisResult.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, pydantic.ValidationError, json.JSONDecodeError) as exc:
            raise errors.StorageError(f"Failed to read {path.name}: {exc}") from exc

    def find_by_url(self, url: str) -> site.AnalysisResult | None:
        path = self._path(url)
        with self._lock:
            if not path.exists():
                return None
            record = self._read(path)
        log.debug("Site record loaded", {"url": url})
        return record

    def upsert_by_url(self, url: str, record: site.AnalysisResult) -> site.AnalysisResult:
        stored = record.model_copy(update={"url": url})
        path = self._path(url)
        tmp = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                self._dir.mkdir(parents=True, exist_ok=True)
                tmp.write_text(stored.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
                os.replace(tmp, path)
            except OSError as exc:
                raise errors.StorageError(f"Failed to write record for {url}: {exc}") from exc
        log.debug("Site record saved", {"url": url, "file": path.name})
        return stored

    def list_all(self) -> list[site.AnalysisResult]:
        if not self._dir.is_dir():
            return []
        records: list[site.AnalysisResult] = []
        with self._lock:
            for path in self._dir.glob("*.json"):
                try:
                    records.append(self._read(path))
                except errors.StorageError as exc:
                    log.warn("Skipping unreadable site record", {"file": path.name, "error": str(exc)})
        return _newest_first(records)


def create_site_store(store_dir: str) -> SiteStore:
    """File-backed store when *store_dir* is set, otherwise in-memory."""
    if store_dir:
        log.info("Using file-backed site store", {"dir": store_dir})
        return JsonFileSiteStore(store_dir)
    log.info("Using in-memory site store")
    return InMemorySiteStore()
