from datetime import datetime
from typing import Optional

from taskboard.models import TaskAction
from taskboard.schemas.base import CamelModel
from taskboard.schemas.user import UserSummary


class TimelineResponse(CamelModel):
    id: str
    action: TaskAction
    actor_id: str
    task_id: str
    actor: Optional[UserSummary] = None
    timestamp: datetime
