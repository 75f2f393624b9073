"""
Edit commands for optimistic grade and weight edits.

The client shows ``proposed`` right away; if the mutation comes back as a
failed ``Result`` the command rolls back and ``displayed`` returns to the
value that was on screen before, keeping the rejected edit for a retry.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from gradeflow.utils.result import Failure, Result

T = TypeVar("T")


class EditStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    ROLLED_BACK = "rolled_back"


@dataclass
class EditCommand(Generic[T]):
    previous: T
    proposed: T
    status: EditStatus = EditStatus.PENDING
    error: Optional[Failure] = field(default=None)

    @property
    def displayed(self) -> T:
        return self.previous if self.status == EditStatus.ROLLED_BACK else self.proposed

    def run(self, mutation: Callable[[T], Result]) -> Result:
        result = mutation(self.proposed)
        if result.ok:
            self.status = EditStatus.APPLIED
            self.error = None
        else:
            self.status = EditStatus.ROLLED_BACK
            self.error = result.error
        return result

    def retry(self, mutation: Callable[[T], Result]) -> Result:
        self.status = EditStatus.PENDING
        return self.run(mutation)
