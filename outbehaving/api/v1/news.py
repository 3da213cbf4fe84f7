"""/v1/news - curated articles with a per-session favourites overlay"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from outbehaving.api.dependencies import CurrentUser, get_app_state, get_current_user, get_db_client
from outbehaving.api.errors import raise_for_state
from outbehaving.api.v1.schemas import ArticleResponse, FavouriteResponse, NewsResponse
from outbehaving.domain.models import NewsTab
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.services.news import NewsService
from outbehaving.state.app import AppState
from outbehaving.state.news import NewsFilters

router = APIRouter()


def get_news_service(
    user: CurrentUser = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: DatabaseClient = Depends(get_db_client),
) -> NewsService:
    return NewsService(state, db, user.id)


@router.get("/news", response_model=NewsResponse)
async def list_news(
    tab: NewsTab = Query(default=NewsTab.POPULAR),
    category: Optional[str] = None,
    champion: Optional[str] = None,
    search: Optional[str] = None,
    service: NewsService = Depends(get_news_service),
):
    if await service.load_articles() is None:
        raise_for_state(service.state.news)
    service.set_active_tab(tab)
    cards = service.articles(NewsFilters(category=category, champion=champion, search=search))
    return NewsResponse(tab=tab.value, articles=[ArticleResponse.from_domain(c) for c in cards])


@router.post("/news/{article_id}/favourite", response_model=FavouriteResponse)
async def toggle_favourite(article_id: str, service: NewsService = Depends(get_news_service)):
    is_favourite = await service.toggle_favourite(article_id)
    return FavouriteResponse(article_id=article_id, is_favourite=is_favourite)
