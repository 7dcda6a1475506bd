"""Common schemas for the TalentDesk API."""

from pydantic import BaseModel


class LoadingResponse(BaseModel):
    """Neutral answer while the session is still loading."""
    status: str = "loading"
    retry_after: int
