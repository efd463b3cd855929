"""Pull request status models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PRState(Enum):
    """State of the most recent pull request for a branch."""
    OPEN = "open"
    DRAFT = "draft"
    MERGED = "merged"
    CLOSED = "closed"
    NONE = "none"  # No PR found, or the lookup failed


class ChecksStatus(Enum):
    """Aggregated check-run status of a pull request's head commit."""
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    NONE = "none"


@dataclass(frozen=True)
class RemoteStatus:
    """Pull request state and checks for one branch."""

    state: PRState
    checks_status: ChecksStatus = ChecksStatus.NONE
    url: Optional[str] = None
    number: Optional[int] = None

    @classmethod
    def none(cls) -> "RemoteStatus":
        return cls(state=PRState.NONE)

    @property
    def is_finished(self) -> bool:
        """True when the branch's PR was merged or closed."""
        return self.state in (PRState.MERGED, PRState.CLOSED)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "state": self.state.value,
            "checksStatus": self.checks_status.value,
        }
        if self.state != PRState.NONE:
            data["url"] = self.url
            data["number"] = self.number
        return data
