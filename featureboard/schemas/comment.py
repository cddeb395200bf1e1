from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[str] = None


class CommentUpdate(BaseModel):
    content: str


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    idea_id: str
    parent_id: Optional[str] = None
    content: str
    author_id: str
    author_name: Optional[str] = None
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
