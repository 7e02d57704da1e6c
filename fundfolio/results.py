# fundfolio/results.py
"""
Tagged stage results. Pipeline stages hand back a Success or a Failure
instead of raising, so callers can tell "empty" apart from "failed".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union


T = TypeVar("T")


class FailureKind(Enum):
    TRANSPORT = "transport"                    # unreachable source / non-2xx status
    MALFORMED_DOCUMENT = "malformed_document"  # JSON of the wrong shape
    NO_DATA = "no_data"                        # every source failed


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    reason: str
    source: Optional[str] = None

    def describe(self) -> str:
        prefix = f"{self.source}: " if self.source else ""
        return f"{prefix}{self.kind.value}: {self.reason}"


Result = Union[Success[T], Failure]
