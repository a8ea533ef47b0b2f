"""
usage_event.py — ORM Model for Audit / Usage Event Records

Purpose:
- Append-only log of user workflow transitions (CAD work started/finished,
  review started, EBOM completed, targets saved, process ended).
- Written through services/usage_events.py, which never lets a failed write
  break the caller's primary action.

Key Points:
- `step` is the event category (usually the selected scenario key, or a
  stage label such as "REVIEW", "LCA TARGET", "PROCESS END").
- `detail` holds a free-form structured payload.
"""

import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from ebom.core.database import Base


class UsageEvent(Base):
    __tablename__ = "usage_events"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String, nullable=True)
    user_email = Column(String, nullable=True)
    treetable_id = Column(String, nullable=True, index=True)

    # Category + human-readable action label
    step = Column(String, nullable=False)
    action = Column(String, nullable=False)

    duration_ms = Column(Integer, nullable=True)

    # Ex: {"total_carbon_kgco2e": 19.5, "threshold_kgco2e": 19.78}
    detail = Column(JSON, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
    )

    def __repr__(self):
        return f"<UsageEvent {self.step} | {self.action}>"
