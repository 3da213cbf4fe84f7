"""Articles, read tracking and the local favourites overlay"""

import logging
from typing import List, Optional

from outbehaving.domain import constants
from outbehaving.domain.models import ArticleCard, NewsTab
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.errors import ErrorHandler
from outbehaving.infrastructure.repositories import ArticleRepository
from outbehaving.services.base import SERVICE_ERRORS, Service
from outbehaving.state.app import AppState
from outbehaving.state.news import NewsFilters

logger = logging.getLogger(__name__)


class NewsService(Service):
    def __init__(
        self,
        state: AppState,
        db: DatabaseClient,
        user_id: Optional[str] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        super().__init__(state, error_handler)
        self.db = db
        self.user_id = user_id
        self.article_repo = ArticleRepository(db)

    async def load_articles(self) -> Optional[List[ArticleCard]]:
        logger.info("Loading articles")
        with self._operation(self.state.news):
            try:
                articles = await self.article_repo.list_latest()
            except SERVICE_ERRORS as e:
                self._fail(self.state.news, e, "NewsService.load_articles")
                return None
            self.state.news.set_articles(articles)
            return self.state.news.articles

    async def mark_article_read(self, article_id: str) -> bool:
        """Best effort; a failure is reported but leaves the news view untouched"""
        if not self.user_id:
            return False
        logger.info("Marking article as read", extra={"user_id": self.user_id, "article_id": article_id})
        try:
            await self.db.insert(constants.USER_ARTICLE_READS, {"user_id": self.user_id, "article_id": article_id})
        except SERVICE_ERRORS as e:
            self.errors.handle(e, "NewsService.mark_article_read")
            return False
        return True

    async def toggle_favourite(self, article_id: str) -> bool:
        is_favourite = self.state.news.toggle_favourite(article_id)
        await self.mark_article_read(article_id)
        return is_favourite

    def set_active_tab(self, tab: NewsTab) -> None:
        self.state.news.set_active_tab(tab)

    def articles(self, filters: Optional[NewsFilters] = None) -> List[ArticleCard]:
        return self.state.news.filtered_articles(filters)
