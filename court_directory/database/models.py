"""
SQLAlchemy ORM models for the court directory.
"""

from dataclasses import dataclass
from typing import Tuple
import enum
from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    literal_column,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from court_directory.database.db import Base
from court_directory.utils.constants import SEARCH_TEXT_CONFIG


class CourtType(str, enum.Enum):
    """Playing environment of a court."""

    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class CourtCost(str, enum.Enum):
    """Whether playing at the court costs money."""

    FREE = "free"
    PAID = "paid"
    UNKNOWN = "unknown"


class CourtStatus(str, enum.Enum):
    """Moderation status of a court listing."""

    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


def _in_enum(column: str, enum_cls) -> str:
    """SQL CHECK expression restricting a column to an enum's values."""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class User(Base):
    """Minimal user record; accounts are owned by the auth provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    is_admin = Column(Boolean, nullable=True)

    submitted_courts = relationship("Court", back_populates="submitter")


class Court(Base):
    """A court listing in the directory."""

    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    address_street = Column(String, nullable=False)
    address_city = Column(String, nullable=False)
    address_state = Column(String, nullable=False)
    address_zip = Column(String(20), nullable=False)
    num_courts = Column(Integer, nullable=False)
    court_type = Column(String(20), nullable=False)  # see CourtType
    cost = Column(String(20), nullable=False)  # see CourtCost
    cost_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False)  # see CourtStatus
    submitted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    # Epoch milliseconds (UTC)
    last_verified_at = Column(BigInteger, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    # Relationships
    submitter = relationship("User", back_populates="submitted_courts")

    __table_args__ = (
        CheckConstraint(_in_enum("court_type", CourtType), name="ck_courts_court_type"),
        CheckConstraint(_in_enum("cost", CourtCost), name="ck_courts_cost"),
        CheckConstraint(_in_enum("status", CourtStatus), name="ck_courts_status"),
        CheckConstraint("num_courts >= 0", name="ck_courts_num_courts"),
        Index("idx_courts_status", "status"),
        Index("idx_courts_location", "address_state", "address_city"),
        Index("idx_courts_court_type", "court_type"),
    )


# Text search configuration as a regconfig constant. Queries must use the same
# expression as the index below for PostgreSQL to pick the index.
SEARCH_TS_CONFIG = literal_column(f"'{SEARCH_TEXT_CONFIG}'::regconfig")

# Full-text index over court names. PostgreSQL only; other dialects fall back
# to term matching in court_service.
Index(
    "idx_courts_name_search",
    func.to_tsvector(SEARCH_TS_CONFIG, Court.__table__.c.name),
    postgresql_using="gin",
).ddl_if(dialect="postgresql")


@dataclass(frozen=True)
class SearchIndex:
    """Declaration of a text search index and the fields it can filter on."""

    name: str
    search_field: str
    filter_fields: Tuple[str, ...]

    def is_filterable(self, field: str) -> bool:
        return field in self.filter_fields


COURT_SEARCH_INDEX = SearchIndex(
    name="idx_courts_name_search",
    search_field="name",
    filter_fields=("status", "court_type", "cost"),
)


def _validate_search_index(model, search_index: SearchIndex) -> None:
    columns = set(model.__table__.columns.keys())
    declared = (search_index.search_field,) + search_index.filter_fields
    missing = [field for field in declared if field not in columns]
    if missing:
        raise RuntimeError(
            f"Search index {search_index.name} references unknown columns: {missing}"
        )


_validate_search_index(Court, COURT_SEARCH_INDEX)
