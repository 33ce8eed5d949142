"""TradeMessage data model."""

from datetime import datetime
from pydantic import BaseModel, Field


class TradeMessage(BaseModel):
    """A message exchanged between the parties of a trade."""

    sender: str = Field(..., description="Sender user ID")
    body: str = Field(..., description="Message body")
    timestamp: datetime = Field(..., description="Sent timestamp")

    model_config = {"frozen": True}
