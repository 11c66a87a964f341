from typing import Optional
from pydantic import BaseModel, Field


class VisitHit(BaseModel):
    """Raw data extracted from one tracking request."""
    address: str = ""
    user_agent: str = ""
    referer: str = ""
    country: str = ""
    raw_path: str = "/"


class IngestionResult(BaseModel):
    page_path: str
    ip_hash: str
    visit_time: int
    is_new_visitor: bool
    counted_for_page: bool


class SiteStatsOut(BaseModel):
    site_total: int = Field(0, alias="siteTotal")
    site_unique: int = Field(0, alias="siteUnique")
    site_last_updated: Optional[int] = Field(None, alias="siteLastUpdated")

    class Config:
        populate_by_name = True


class PageStatsOut(BaseModel):
    path: str
    article_total: int = Field(0, alias="articleTotal")
    article_last_updated: Optional[int] = Field(None, alias="articleLastUpdated")
    site_total: int = Field(0, alias="siteTotal")
    site_unique: int = Field(0, alias="siteUnique")
    site_last_updated: Optional[int] = Field(None, alias="siteLastUpdated")

    class Config:
        populate_by_name = True


class RealtimeStatsOut(BaseModel):
    total: int
    unique: int
    period: str
    path: Optional[str] = None



class HealthOut(BaseModel):
    status: str = "ok"
