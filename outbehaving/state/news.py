"""News container - articles plus a local-only favourites overlay"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from outbehaving.domain.models import Article, ArticleCard, NewsTab
from outbehaving.state.base import StatusFlags

logger = logging.getLogger(__name__)


@dataclass
class NewsFilters:
    category: Optional[str] = None
    champion: Optional[str] = None
    search: Optional[str] = None

    def matches(self, article: Article) -> bool:
        if self.category and article.category.lower() != self.category.lower():
            return False
        if self.champion and (article.champion or "").lower() != self.champion.lower():
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in article.title.lower() and needle not in article.summary.lower():
                return False
        return True


class NewsState(StatusFlags):
    """
    Favourites are never synchronised with the backend; they live only as
    long as this container and survive article reloads.
    """

    def __init__(self) -> None:
        super().__init__()
        self.reset()

    def set_articles(self, articles: Iterable[Article]) -> None:
        self.articles = [ArticleCard(article=a, is_favourite=a.id in self.favourite_ids) for a in articles]
        logger.debug("Setting articles in store", extra={"count": len(self.articles)})

    def add_article(self, article: Article) -> None:
        logger.debug("Adding article to store", extra={"article_id": article.id})
        self.articles.append(ArticleCard(article=article, is_favourite=article.id in self.favourite_ids))

    def toggle_favourite(self, article_id: str) -> bool:
        """Flip favourite status; returns the new status"""
        logger.debug("Toggling article favourite", extra={"article_id": article_id})
        if article_id in self.favourite_ids:
            self.favourite_ids.discard(article_id)
        else:
            self.favourite_ids.add(article_id)

        is_favourite = article_id in self.favourite_ids
        for card in self.articles:
            if card.id == article_id:
                card.is_favourite = is_favourite
        return is_favourite

    def set_active_tab(self, tab: NewsTab) -> None:
        logger.debug("Setting active news tab", extra={"tab": tab.value})
        self.active_tab = NewsTab(tab)

    def filtered_articles(self, filters: Optional[NewsFilters] = None) -> List[ArticleCard]:
        """Apply the tab and optional filters at read time"""
        cards = self.articles
        if self.active_tab == NewsTab.FAVOURITES:
            cards = [card for card in cards if card.is_favourite]
        if filters:
            cards = [card for card in cards if filters.matches(card.article)]
        return list(cards)

    def reset(self) -> None:
        logger.info("Resetting news store")
        self.articles: List[ArticleCard] = []
        self.favourite_ids: Set[str] = set()
        self.active_tab = NewsTab.POPULAR
        self._reset_status()
