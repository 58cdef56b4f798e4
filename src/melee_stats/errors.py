"""Corpus-level failures and the structured value analyze() reports them as."""

from dataclasses import dataclass


class AnalysisError(Exception):
    """A failure that aborts the whole run rather than a single replay."""

    kind = "analysis_error"


class FolderNotFoundError(AnalysisError):
    kind = "folder_not_found"


class CacheWriteError(AnalysisError):
    kind = "cache_write_failed"


@dataclass(frozen=True)
class AnalysisFailure:
    """Returned by analyze() instead of a report when the run cannot complete."""

    error: str
    message: str
    folder: str

    @classmethod
    def from_exception(cls, exc: AnalysisError, folder) -> "AnalysisFailure":
        return cls(error=exc.kind, message=str(exc), folder=str(folder))

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message, "folder": self.folder}
