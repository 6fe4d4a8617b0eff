"""
Pydantic models for API request/response validation.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from court_directory.database.models import CourtCost, CourtStatus, CourtType


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class CreateCourtRequest(CamelModel):
    """Request to create a court."""

    name: str
    address_street: str
    address_city: str
    address_state: str
    address_zip: str
    num_courts: int = Field(ge=0)
    court_type: CourtType
    cost: CourtCost
    cost_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    status: CourtStatus
    submitted_by: Optional[int] = None  # users.id


class UpdateCourtRequest(CamelModel):
    """Partial court update. Only fields present in the body are written."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="forbid")

    name: Optional[str] = None
    address_street: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zip: Optional[str] = None
    num_courts: Optional[int] = Field(default=None, ge=0)
    court_type: Optional[CourtType] = None
    cost: Optional[CourtCost] = None
    cost_notes: Optional[str] = None  # null clears the note
    admin_notes: Optional[str] = None  # null clears the note
    status: Optional[CourtStatus] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        nullable = {"cost_notes", "admin_notes"}
        for field in self.model_fields_set - nullable:
            if getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self


class CourtResponse(CamelModel):
    """Court record. Timestamps are epoch milliseconds."""

    id: int
    name: str
    address_street: str
    address_city: str
    address_state: str
    address_zip: str
    num_courts: int
    court_type: CourtType
    cost: CourtCost
    cost_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    status: CourtStatus
    submitted_by: Optional[int] = None
    last_verified_at: int
    created_at: int
    updated_at: int


class CourtPageResponse(CamelModel):
    """One page of a court listing plus its continuation state."""

    page: List[CourtResponse]
    continue_cursor: str
    is_done: bool


class CourtIdResponse(CamelModel):
    """Identifier of the court a mutation touched."""

    id: int
