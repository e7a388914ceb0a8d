"""Pydantic models for per-user digests and pass reports."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from models.resource import Application, ChangeRecord
from models.types import UserID


class UserDigest(BaseModel):
    """Changes relevant to one subscriber, bucketed by application."""

    model_config = ConfigDict(frozen=True)

    user_id: UserID
    buckets: dict[Application, list[ChangeRecord]] = Field(default_factory=dict)

    def records_for(self, application: Application) -> list[ChangeRecord]:
        return self.buckets.get(application, [])

    @property
    def is_empty(self) -> bool:
        return not any(self.buckets.values())

    @property
    def total(self) -> int:
        return sum(len(records) for records in self.buckets.values())


class DispatchReport(BaseModel):
    """Outcome of one scheduled pass, collected from per-user send tasks."""

    cutoff: datetime
    dry_run: bool = False
    sent: list[UserID] = Field(default_factory=list)
    failed: dict[UserID, str] = Field(default_factory=dict)

    @property
    def stats(self) -> dict[str, int]:
        return {"sent": len(self.sent), "failed": len(self.failed)}

    @property
    def ok(self) -> bool:
        return not self.failed
