"""Employee portal request models"""

from pydantic import BaseModel, field_validator


class StatusUpdate(BaseModel):
    """Status change for quotes and contact messages (free-form backend statuses)"""

    status: str

    @field_validator("status")
    @classmethod
    def status_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Status is required")
        return v
