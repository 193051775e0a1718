"""Emergency contact schemas."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

# Matches the sos_send_results.contact column width
ContactNumber = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]


class ContactsUpdate(BaseModel):
    """Whole-list replacement of a user's emergency contacts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int
    contacts: list[ContactNumber] = Field(..., description="Ordered phone numbers; duplicates allowed")


class ContactsResponse(BaseModel):
    success: bool = True
    message: str | None = None
    contacts: list[str]
