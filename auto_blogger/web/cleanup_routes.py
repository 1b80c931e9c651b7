"""Admin endpoints for deleting blogs and inspecting retention."""
from fastapi import APIRouter, Depends, HTTPException
from auto_blogger.storage.blogs import serialize_blog
from auto_blogger.web.schemas import CleanupOldRequest, KeepLatestRequest, CleanupRunRequest
from auto_blogger.web.services import Services, get_services

router = APIRouter(prefix='/api/cleanup', tags=['cleanup'])


@router.get('/stats')
def database_stats(services: Services = Depends(get_services)):
    return {'success': True, 'stats': services.cleanup_manager.get_stats()}


@router.get('/cleanup/report')
def cleanup_report(services: Services = Depends(get_services)):
    return {'success': True, 'stats': services.cleanup_manager.get_cleanup_stats()}


@router.get('/cleanup/preview/{days_old}')
def cleanup_preview(days_old: int, services: Services = Depends(get_services)):
    blogs = services.cleanup_manager.list_blogs_to_delete(days_old)
    return {
        'success': True,
        'blogs': [serialize_blog(b) for b in blogs],
        'count': len(blogs),
        'message': f"Found {len(blogs)} blogs older than {days_old} days"
    }


@router.post('/cleanup/old')
def cleanup_old(body: CleanupOldRequest = CleanupOldRequest(), services: Services = Depends(get_services)):
    deleted = services.cleanup_manager.delete_old_blogs(body.days_old)
    return {'success': True, 'message': f"Deleted {deleted} old blogs", 'deleted_count': deleted}


@router.post('/cleanup/keep-latest')
def cleanup_keep_latest(body: KeepLatestRequest = KeepLatestRequest(), services: Services = Depends(get_services)):
    deleted = services.cleanup_manager.keep_latest_blogs(body.keep_count)
    return {
        'success': True,
        'message': f"Kept latest {body.keep_count} blogs, deleted {deleted} old blogs",
        'deleted_count': deleted
    }


@router.post('/cleanup/duplicates')
def cleanup_duplicates(services: Services = Depends(get_services)):
    deleted = services.cleanup_manager.delete_duplicate_blogs()
    return {'success': True, 'message': f"Deleted {deleted} duplicate blogs", 'deleted_count': deleted}


@router.post('/cleanup/run')
def cleanup_run(body: CleanupRunRequest = CleanupRunRequest(), services: Services = Depends(get_services)):
    results = services.cleanup_manager.perform_cleanup(
        delete_old=body.delete_old,
        days_old=body.days_old,
        remove_duplicates=body.remove_duplicates,
        categories=body.categories
    )
    return {'success': True, 'results': results}


@router.delete('/category/{category}')
def delete_category(category: str, services: Services = Depends(get_services)):
    deleted = services.cleanup_manager.delete_blogs_by_category(category)
    return {
        'success': True,
        'message': f"Deleted {deleted} blogs from {category} category",
        'deleted_count': deleted
    }


@router.delete('/{blog_id}')
def delete_blog(blog_id: str, services: Services = Depends(get_services)):
    if not services.cleanup_manager.delete_blog_by_id(blog_id):
        raise HTTPException(status_code=404, detail='Blog not found')
    return {'success': True, 'message': 'Blog deleted successfully'}
