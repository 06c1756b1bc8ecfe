"""
Education Service
Health topics, articles and per-user reading progress
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError

from database import get_db_context
import models
from exceptions import NotFoundError, wrap_transient_errors


logger = logging.getLogger(__name__)


class EducationService:
    """
    Service for the health-education reader
    """

    @wrap_transient_errors
    async def list_topics(self, db: Optional[Session] = None) -> List[models.HealthTopic]:
        """All topics in display order"""
        def _get(session: Session) -> List[models.HealthTopic]:
            return session.query(models.HealthTopic).order_by(
                models.HealthTopic.order_index,
                models.HealthTopic.id
            ).all()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    @wrap_transient_errors
    async def list_articles(
        self,
        user_id: int,
        topic_id: Optional[int] = None,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """
        Articles, newest first, each with its topic and the caller's
        read/bookmark flags
        """
        def _get(session: Session) -> List[Dict[str, Any]]:
            query = session.query(models.HealthArticle).options(
                joinedload(models.HealthArticle.topic)
            )
            if topic_id is not None:
                query = query.filter(models.HealthArticle.topic_id == topic_id)
            articles = query.order_by(
                models.HealthArticle.published_at.desc(),
                models.HealthArticle.id.desc()
            ).all()

            progress = {
                p.article_id: p
                for p in session.query(models.ArticleProgress).filter(
                    models.ArticleProgress.user_id == user_id
                ).all()
            }

            return [
                {
                    "article": article,
                    "topic": article.topic,
                    "is_read": article.id in progress and progress[article.id].read_at is not None,
                    "is_bookmarked": article.id in progress and progress[article.id].bookmarked,
                }
                for article in articles
            ]

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    def _upsert_progress(self, session: Session, user_id: int, article_id: int, **values) -> models.ArticleProgress:
        """Insert or update the (user, article) progress row"""
        if not session.query(models.HealthArticle.id).filter(
            models.HealthArticle.id == article_id
        ).first():
            raise NotFoundError(f"Article {article_id} not found")

        def _existing():
            return session.query(models.ArticleProgress).filter(
                and_(
                    models.ArticleProgress.user_id == user_id,
                    models.ArticleProgress.article_id == article_id
                )
            ).first()

        progress = _existing()
        if progress is None:
            progress = models.ArticleProgress(user_id=user_id, article_id=article_id, **values)
            session.add(progress)
            try:
                session.commit()
            except IntegrityError:
                # Inserted concurrently; fall through to an update
                session.rollback()
                progress = _existing()
            else:
                session.refresh(progress)
                return progress

        for field, value in values.items():
            setattr(progress, field, value)
        session.commit()
        session.refresh(progress)
        return progress

    @wrap_transient_errors
    async def mark_read(
        self,
        user_id: int,
        article_id: int,
        db: Optional[Session] = None
    ) -> models.ArticleProgress:
        """Record that the user opened the article"""
        def _mark(session: Session) -> models.ArticleProgress:
            return self._upsert_progress(session, user_id, article_id, read_at=datetime.utcnow())

        if db:
            return _mark(db)

        with get_db_context() as session:
            return _mark(session)

    @wrap_transient_errors
    async def set_bookmark(
        self,
        user_id: int,
        article_id: int,
        bookmarked: bool,
        db: Optional[Session] = None
    ) -> models.ArticleProgress:
        """Bookmark or un-bookmark an article for the user"""
        def _set(session: Session) -> models.ArticleProgress:
            return self._upsert_progress(session, user_id, article_id, bookmarked=bookmarked)

        if db:
            return _set(db)

        with get_db_context() as session:
            return _set(session)


# Singleton instance
education_service = EducationService()
