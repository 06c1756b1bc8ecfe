"""
Education API Router
Endpoints for health topics, articles and reading progress
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import models
from api.deps import get_db, get_current_user, services
from api.schemas.education import (
    TopicResponse,
    ArticleResponse,
    BookmarkUpdate,
    ProgressResponse,
)


router = APIRouter(prefix="/education", tags=["education"])


@router.get("/topics", response_model=List[TopicResponse])
async def list_topics(
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Health topics in display order"""
    education_service = services.get_education_service()
    return await education_service.list_topics(db=db)


@router.get("/articles", response_model=List[ArticleResponse])
async def list_articles(
    topic_id: Optional[int] = Query(None),
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Articles, newest first, with the caller's read and bookmark flags"""
    education_service = services.get_education_service()
    entries = await education_service.list_articles(user.id, topic_id=topic_id, db=db)

    return [
        ArticleResponse(
            id=entry["article"].id,
            topic_id=entry["article"].topic_id,
            topic_title=entry["topic"].title,
            title=entry["article"].title,
            summary=entry["article"].summary,
            content=entry["article"].content,
            reading_time_minutes=entry["article"].reading_time_minutes,
            published_at=entry["article"].published_at,
            is_read=entry["is_read"],
            is_bookmarked=entry["is_bookmarked"],
        )
        for entry in entries
    ]


@router.post("/articles/{article_id}/read", response_model=ProgressResponse)
async def mark_article_read(
    article_id: int,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record that the caller read an article"""
    education_service = services.get_education_service()
    return await education_service.mark_read(user.id, article_id, db=db)


@router.put("/articles/{article_id}/bookmark", response_model=ProgressResponse)
async def set_bookmark(
    article_id: int,
    bookmark_data: BookmarkUpdate,
    user: models.Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Bookmark or un-bookmark an article"""
    education_service = services.get_education_service()
    return await education_service.set_bookmark(
        user.id, article_id, bookmark_data.bookmarked, db=db
    )
