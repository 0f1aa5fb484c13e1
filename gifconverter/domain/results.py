"""
Data models for the outcome of a converter run.

Each source file produces exactly one `FileResult`, whether it succeeded or
failed. The pipeline collects them into a `BatchReport`, which can be dumped to
YAML for later inspection.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger

from .media import EncodeTarget


@dataclass
class FileResult:
    """
    Outcome of processing one source file.

    Attributes:
        source (Path): The source file.
        trace (str): Trace id used in the log lines of this file.
        ok (bool): True if the output GIF was written.
        output_path (Path | None): Where the GIF was written.
        processed_path (Path | None): Where the source was relocated, if it was.
        compression_step (int | None): Terminal compression step (-1 means none).
        size_bytes (int | None): Size of the written GIF.
        target (EncodeTarget | None): Frame rate and height used for transcoding.
        error_kind (str | None): `probe`, `transcode`, `compression`, `filesystem` or `unexpected`.
        error_detail (str | None): Full error message of a failure.
    """

    source: Path
    trace: str
    ok: bool
    output_path: Optional[Path] = None
    processed_path: Optional[Path] = None
    compression_step: Optional[int] = None
    size_bytes: Optional[int] = None
    target: Optional[EncodeTarget] = None
    error_kind: Optional[str] = None
    error_detail: Optional[str] = None

    @classmethod
    def failure(cls, source: Path, trace: str, error_kind: str, error_detail: str,
                target: Optional[EncodeTarget] = None) -> "FileResult":
        return cls(source=source, trace=trace, ok=False, target=target,
                   error_kind=error_kind, error_detail=error_detail)

    def to_dict(self) -> dict:
        entry = {
            "source": str(self.source),
            "trace": self.trace,
            "ok": self.ok,
        }
        if self.target:
            entry["fps"] = self.target.fps
            entry["height"] = self.target.height
        if self.ok:
            entry["output_path"] = str(self.output_path)
            entry["compression_step"] = self.compression_step
            entry["size_bytes"] = self.size_bytes
            if self.processed_path:
                entry["processed_path"] = str(self.processed_path)
        else:
            entry["error_kind"] = self.error_kind
            entry["error_detail"] = self.error_detail
        return entry


@dataclass
class BatchReport:
    """Aggregated results of one run."""

    results: List[FileResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def add(self, result: FileResult):
        self.results.append(result)

    def finish(self):
        self.finished_at = datetime.now(timezone.utc)

    @property
    def succeeded(self) -> List[FileResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def bytes_written(self) -> int:
        return sum(r.size_bytes or 0 for r in self.succeeded)

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total": self.total,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "bytes_written": self.bytes_written,
            "files": [r.to_dict() for r in sorted(self.results, key=lambda r: str(r.source))],
        }

    def write_yaml(self, path: Path):
        """
        Dumps the report to `path` as YAML, creating parent directories as needed.

        Failures are logged rather than raised: the report is informational and
        must not turn a finished batch into a failed one.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    self.to_dict(),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
            logger.info(f"Batch report written to {path}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write batch report {path}: {e}")
