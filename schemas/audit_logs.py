from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

class AuditLog(BaseModel):
    id: int
    action: str
    resource: str
    resource_id: Optional[int] = None
    user_id: Optional[int] = None
    old_values: Optional[Any] = None
    new_values: Optional[Any] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
