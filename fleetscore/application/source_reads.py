"""
Concurrent source reads.

Runs independent record-store reads on a thread pool. A failed read is
logged and recorded by name; the other reads still complete, so callers
can degrade only the affected sub-scores.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable

from fleetscore.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class SourceReads:
    results: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(sorted(self.errors))

    def get(self, name: str, default: Any = None) -> Any:
        return self.results.get(name, default)


def read_sources(
    reads: dict[str, Callable[[], Any]],
    max_workers: int | None = None,
) -> SourceReads:
    out = SourceReads()
    if not reads:
        return out

    workers = max_workers or get_settings().READ_WORKERS
    executor = ThreadPoolExecutor(max_workers=min(workers, len(reads)))
    try:
        futures = {executor.submit(fn): name for name, fn in reads.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                out.results[name] = future.result()
            except Exception as exc:
                logger.exception("Source read failed: %s", name)
                out.errors[name] = f"{type(exc).__name__}: {exc}"
    finally:
        executor.shutdown(wait=True)
    return out
