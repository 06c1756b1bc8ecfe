"""
Education Schemas
Pydantic models for health topics, articles and reading progress
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from models import TopicCategory


class TopicResponse(BaseModel):
    id: int
    title: str
    category: TopicCategory
    description: Optional[str] = ""
    icon: Optional[str] = None
    order_index: int = 0

    model_config = ConfigDict(from_attributes=True)


class ArticleResponse(BaseModel):
    """Article with the caller's reading flags"""
    id: int
    topic_id: int
    topic_title: str
    title: str
    summary: Optional[str] = ""
    content: str
    reading_time_minutes: int
    published_at: Optional[datetime] = None
    is_read: bool = False
    is_bookmarked: bool = False


class BookmarkUpdate(BaseModel):
    bookmarked: bool


class ProgressResponse(BaseModel):
    article_id: int
    read_at: Optional[datetime] = None
    bookmarked: bool

    model_config = ConfigDict(from_attributes=True)
