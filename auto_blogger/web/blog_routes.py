"""Public blog endpoints and admin generation."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from auto_blogger.feeds.gnews_api import parse_article_date
from auto_blogger.storage.blogs import build_blog_document, serialize_blog, total_pages
from auto_blogger.web.schemas import BlogCreate, GenerateRequest
from auto_blogger.web.services import Services, get_services
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

router = APIRouter(prefix='/api/blogs', tags=['blogs'])


def _parse_date_param(name: str, value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = parse_article_date(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")
    return parsed


def _page_info(page: int, limit: int, total: int) -> Dict[str, Any]:
    pages = total_pages(total, limit)
    return {
        'current_page': page,
        'total_pages': pages,
        'total_blogs': total,
        'has_next': page < pages,
        'has_prev': page > 1
    }


def _serialize_all(blogs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_blog(b) for b in blogs]


@router.get('')
def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = 'newest',
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    services: Services = Depends(get_services)
):
    """Published blogs without content, with pagination info and filter facets."""
    blogs, total = services.repository.list_blogs(
        page=page,
        limit=limit,
        sort=sort,
        category=category,
        tag=tag,
        search=search,
        date_from=_parse_date_param('date_from', date_from),
        date_to=_parse_date_param('date_to', date_to)
    )
    facets = services.repository.get_filter_facets()

    return {
        'success': True,
        'blogs': _serialize_all(blogs),
        'pagination': _page_info(page, limit, total),
        'filters': {
            'categories': facets['categories'],
            'tags': facets['tags'],
            'current_filters': {
                'category': category,
                'tag': tag,
                'search': search,
                'sort': sort,
                'date_from': date_from,
                'date_to': date_to
            }
        }
    }


@router.post('', status_code=201)
def create_blog(body: BlogCreate, services: Services = Depends(get_services)):
    document = build_blog_document(
        title=body.title,
        excerpt=body.excerpt,
        content=body.content,
        tags=body.tags,
        category=body.category,
        status=body.status
    )
    blog = services.repository.create(document)
    return {
        'success': True,
        'message': 'Blog created successfully',
        'id': str(blog['_id']),
        'title': blog['title'],
        'slug': blog['slug'],
        'category': blog['category'],
        'tags': blog['tags'],
        'word_count': blog['word_count'],
        'estimated_read_time': blog['estimated_read_time'],
        'created_at': blog['created_at'].isoformat()
    }


@router.get('/featured/popular')
def popular_blogs(limit: int = Query(5, ge=1, le=50), services: Services = Depends(get_services)):
    return _serialize_all(services.repository.get_popular(limit))


@router.get('/featured/recent')
def recent_blogs(
    days: int = Query(7, ge=1),
    limit: int = Query(5, ge=1, le=50),
    services: Services = Depends(get_services)
):
    return _serialize_all(services.repository.get_recent(days, limit))


@router.get('/category/{category}')
def blogs_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    services: Services = Depends(get_services)
):
    blogs, total = services.repository.find_by_category(category, page, limit)
    return dict(_page_info(page, limit, total), blogs=_serialize_all(blogs), category=category)


@router.get('/tag/{tag}')
def blogs_by_tag(
    tag: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    services: Services = Depends(get_services)
):
    blogs, total = services.repository.find_by_tag(tag, page, limit)
    return dict(_page_info(page, limit, total), blogs=_serialize_all(blogs), tag=tag)


@router.get('/admin/stats')
def admin_stats(services: Services = Depends(get_services)):
    stats = services.repository.get_admin_stats()
    stats['recent_activity'] = _serialize_all(stats['recent_activity'])
    return dict(stats, success=True)


@router.post('/admin/generate')
def generate_blog(body: GenerateRequest, services: Services = Depends(get_services)):
    """Fetch news for a category and generate a blog post synchronously."""
    blog = services.runner.generate_for_category(body.category, body.topic, body.max_articles)
    return {
        'success': True,
        'message': 'Blog generated successfully',
        'blog': {
            'id': str(blog['_id']),
            'title': blog['title'],
            'slug': blog['slug'],
            'excerpt': blog['excerpt'],
            'tags': blog['tags'],
            'category': blog['category'],
            'created_at': blog['created_at'].isoformat()
        }
    }


@router.get('/meta/categories')
def categories(services: Services = Depends(get_services)):
    return services.repository.distinct_categories()


@router.get('/meta/tags')
def tags(services: Services = Depends(get_services)):
    return services.repository.distinct_tags()


@router.get('/{slug}')
def get_blog(slug: str, services: Services = Depends(get_services)):
    """A published blog by slug; counts a view and returns related posts."""
    blog = services.repository.find_by_slug(slug)
    if not blog:
        raise HTTPException(status_code=404, detail='Blog not found')

    blog = services.repository.increment_view(blog['_id']) or blog
    related = services.repository.get_related(blog, limit=3)
    return {
        'success': True,
        'blog': serialize_blog(blog),
        'related_blogs': _serialize_all(related)
    }


@router.post('/{slug}/like')
def like_blog(slug: str, services: Services = Depends(get_services)):
    likes = services.repository.add_like(slug)
    if likes is None:
        raise HTTPException(status_code=404, detail='Blog not found')
    return {'success': True, 'likes': likes}
