from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from featureboard.models.idea import IdeaStatus


class IdeaCreate(BaseModel):
    title: str
    description: str


class IdeaUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    # Admin-only fields
    is_public: Optional[bool] = None
    is_pinned: Optional[bool] = None
    status: Optional[IdeaStatus] = None


class IdeaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    author_id: str
    author_name: Optional[str] = None
    status: str
    is_public: bool
    is_pinned: bool = False
    vote_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime
    last_status_update: datetime


class IdeaCreated(BaseModel):
    id: str
    success: bool = True
    message: str = "Idea submitted successfully"
    idea: IdeaOut


class VoteState(BaseModel):
    idea_id: str
    has_voted: bool
    vote_count: int


class StatusChange(BaseModel):
    status: IdeaStatus


class BulkRequest(BaseModel):
    idea_ids: List[str]


class BulkResult(BaseModel):
    succeeded: List[str] = []
    failed: List[str] = []
    errors: Dict[str, str] = {}


class AdminStats(BaseModel):
    total_ideas: int
    pending_reviews: int
    total_users: int
    active_users: int
    ideas_by_status: Dict[str, int]
