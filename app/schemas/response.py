from pydantic import BaseModel
from typing import Optional, Any, List

from app.models.user import User

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class UserIDResponse(BaseModel):
    """
    Returned by user creation.
    """
    user_id: str

class UserListResponse(BaseModel):
    """
    Search result page.
    """
    users: List[User]
    total: int
    page: int
