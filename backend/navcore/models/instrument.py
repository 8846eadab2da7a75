"""Tracked instrument model."""

from pydantic import BaseModel, ConfigDict


class Instrument(BaseModel):
    """A tracked fund: display name plus the provider's scheme code."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
