from pydantic import BaseModel, ConfigDict, Field


class SubscriptionStatus(BaseModel):
    """Whether the current user is subscribed to a channel."""
    is_subscribed: bool = Field(..., serialization_alias="isSubscribed")

    model_config = ConfigDict(populate_by_name=True)
