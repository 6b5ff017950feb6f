"""Status-change records shared by orders and shipments"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

SYSTEM_ACTOR = "system"


class StatusChange(BaseModel):
    """One immutable entry in an order or shipment status log"""
    model_config = ConfigDict(frozen=True)

    status: str
    timestamp: datetime
    actor_id: str
    reason: Optional[str] = None
