from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional

GenerationStatus = Literal["success", "error"]

# invalid_argument | timeout | connection | http_error | parse_error | provider_error | unknown
ErrorType = str


@dataclass
class GenerationResult:
    status: GenerationStatus
    output: Optional[str] = None
    error_type: Optional[ErrorType] = None
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, output: str) -> "GenerationResult":
        return cls(status="success", output=output)

    @classmethod
    def failure(
        cls,
        error_type: ErrorType,
        detail: str,
        status_code: Optional[int] = None,
    ) -> "GenerationResult":
        return cls(status="error", error_type=error_type, detail=detail, status_code=status_code)


@dataclass
class ClassificationResult:
    success: bool
    label: Optional[str] = None
    confidence: Optional[float] = None   # 0.0 - 1.0
    filename: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def failure(cls, detail: str) -> "ClassificationResult":
        return cls(success=False, detail=detail)


@dataclass(frozen=True)
class JobHandle:
    id: str


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def from_remote(cls, value: Any) -> "JobStatus":
        """Map a remote status string onto the local lifecycle."""
        return _REMOTE_STATUS.get(value, cls.UNKNOWN) if isinstance(value, str) else cls.UNKNOWN


_REMOTE_STATUS = {
    "starting": JobStatus.PENDING,
    "processing": JobStatus.RUNNING,
    "succeeded": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
}


JobOutcome = Literal["succeeded", "failed", "timeout"]


@dataclass
class JobResult:
    status: JobOutcome
    output: Any = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"
