"""
app/models/user.py

Purpose: User document model

- User record as stored in the search index
- Geo location pair
- Search filter record
- Every field optional: None means "absent / do not touch / do not filter"
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class Location(BaseModel):
    """Geo point in degrees."""
    lat: float = Field(..., examples=[59.934280])
    lon: float = Field(..., examples=[30.335098])


class User(BaseModel):
    """
    User record.

    The same shape serves creation, full replacement, partial update and
    responses, so nothing is required at the type level. Presence is what
    triggers validation.
    """
    id: Optional[str] = Field(default=None, examples=["507f1f77bcf86cd799439011"])
    login: Optional[str] = Field(default=None, examples=["john_doe"])
    username: Optional[str] = Field(default=None, examples=["John Doe"])
    password: Optional[str] = Field(default=None, examples=["secret123"])
    description: Optional[str] = Field(default=None, examples=["Developer from Saint Petersburg"])
    comment: Optional[str] = Field(default=None, examples=["Important client"])
    reg_date: Optional[datetime] = Field(default=None, examples=["2023-01-15T12:34:56Z"])
    location: Optional[Location] = None
    social_net: Optional[str] = Field(default=None, examples=["telegram"])

    def to_document(self) -> Dict[str, Any]:
        """
        Returns the index source for this user: present fields only,
        identifier excluded (it is the document _id).
        """
        return self.model_dump(mode="json", exclude_none=True, exclude={"id"})

    @classmethod
    def from_document(cls, doc_id: str, source: Dict[str, Any]) -> "User":
        """Builds a user from a search hit or get response."""
        return cls(**{**source, "id": doc_id})

    def redacted(self) -> "User":
        """Copy with the password removed, for anything leaving the service."""
        return self.model_copy(update={"password": None})

    def __str__(self) -> str:
        parts = []
        for name, value in self:
            if value is None or value == "":
                continue
            if name == "password":
                value = "[hidden]"
            elif name == "reg_date":
                value = value.isoformat()
            parts.append(f"{name}: {value}")
        return "User{" + ", ".join(parts) + "}"


class UserFilter(BaseModel):
    """
    Search parameters. Absent fields add no clause.
    """
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    distance: Optional[str] = None
    social_net: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: Optional[int] = None
    size: Optional[int] = None

    def __str__(self) -> str:
        parts = [f"{name}: {value}" for name, value in self if value is not None and value != ""]
        return "UserFilter{" + ", ".join(parts) + "}"
