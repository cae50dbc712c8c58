from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Bill(BaseModel):
    """Subscription amount and how long a paid subscription lasts."""

    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(0.0, alias="Amount", description="Subscription amount")
    duration: timedelta = Field(
        timedelta(0), alias="Duration", description="Validity of a subscription before expiry"
    )

    # The API encodes durations as integer nanoseconds
    @field_validator('duration', mode='before')
    @classmethod
    def duration_from_nanoseconds(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return timedelta(microseconds=int(v) // 1000)
        return v

    @field_serializer('duration')
    def duration_to_nanoseconds(self, v: timedelta) -> int:
        return (v // timedelta(microseconds=1)) * 1000
