# compliancetrack/schemas/comment.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, constr


class CommentCreate(BaseModel):
    content: constr(strip_whitespace=True, min_length=1, max_length=2000)


class CommentUpdate(CommentCreate):
    pass


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    obligation_id: str
    user_id: Optional[int] = None
    author_name: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime
