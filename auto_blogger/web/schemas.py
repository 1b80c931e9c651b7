"""Request bodies accepted by the REST API."""
from typing import List, Optional
from pydantic import BaseModel, Field


class BlogCreate(BaseModel):
    title: str
    excerpt: str
    content: str
    tags: List[str] = []
    category: str = 'general'
    status: str = 'published'


class GenerateRequest(BaseModel):
    category: str = 'technology'
    topic: Optional[str] = None
    max_articles: int = Field(5, ge=1, le=20)


class CleanupOldRequest(BaseModel):
    days_old: int = Field(30, ge=0)


class KeepLatestRequest(BaseModel):
    keep_count: int = Field(10, ge=0)


class CleanupRunRequest(BaseModel):
    delete_old: bool = False
    days_old: int = Field(30, ge=0)
    remove_duplicates: bool = False
    categories: List[str] = []


class SubscribeRequest(BaseModel):
    email: Optional[str] = None
