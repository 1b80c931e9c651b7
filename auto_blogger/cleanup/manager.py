"""Retention policies for stored blog posts."""
from datetime import timedelta
from typing import Any, Dict, List, Optional
from dateutil.relativedelta import relativedelta
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from auto_blogger.config.settings import RETENTION_SETTINGS
from auto_blogger.core.constants import BlogStatus
from auto_blogger.core.types import Blog, CleanupResults, CleanupStats
from auto_blogger.storage.blogs import to_object_id
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import setup_logger, update_metrics

logger = setup_logger()

PREVIEW_FIELDS = {'title': 1, 'slug': 1, 'category': 1, 'status': 1, 'created_at': 1, 'view_count': 1, 'likes': 1}


class BlogCleanupManager:
    """Deletes blogs according to age, count, engagement and duplication rules."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def _delete_ids(self, ids: List[Any]) -> int:
        if not ids:
            return 0
        result = self.collection.delete_many({'_id': {'$in': ids}})
        update_metrics('blogs_deleted', result.deleted_count)
        return result.deleted_count

    def _delete_matching(self, query: Dict[str, Any]) -> int:
        result = self.collection.delete_many(query)
        update_metrics('blogs_deleted', result.deleted_count)
        return result.deleted_count

    def delete_blog_by_id(self, blog_id: Any) -> bool:
        """
        Delete a single blog.

        Returns:
            True if a blog was deleted, False if none matched

        Raises:
            bson.errors.InvalidId: If blog_id is not a valid ObjectId
        """
        try:
            deleted = self.collection.find_one_and_delete({'_id': to_object_id(blog_id)})
        except Exception as e:
            logger.error(f"Error deleting blog {blog_id}: {str(e)}")
            raise

        if deleted:
            update_metrics('blogs_deleted', 1)
            logger.info(f"Deleted blog: {deleted.get('title')} ({blog_id})")
            return True

        logger.info(f"Blog not found: {blog_id}")
        return False

    def delete_old_blogs(self, days_old: int = RETENTION_SETTINGS['default_days_old']) -> int:
        cutoff = utcnow() - timedelta(days=days_old)
        try:
            deleted = self._delete_matching({'created_at': {'$lt': cutoff}})
        except Exception as e:
            logger.error(f"Error deleting old blogs: {str(e)}")
            raise

        logger.info(f"Deleted {deleted} blogs older than {days_old} days")
        return deleted

    def delete_blogs_by_category(self, category: str) -> int:
        try:
            deleted = self._delete_matching({'category': category.lower()})
        except Exception as e:
            logger.error(f"Error deleting blogs from category {category}: {str(e)}")
            raise

        logger.info(f"Deleted {deleted} blogs from category: {category}")
        return deleted

    def delete_duplicate_blogs(self) -> int:
        """Delete blogs sharing an exact title, keeping the oldest of each group."""
        try:
            duplicates = self.collection.aggregate([
                {'$sort': {'created_at': 1}},
                {'$group': {'_id': '$title', 'ids': {'$push': '$_id'}, 'count': {'$sum': 1}}},
                {'$match': {'count': {'$gt': 1}}}
            ])
            deleted = 0
            for group in duplicates:
                deleted += self._delete_ids(group['ids'][1:])
        except Exception as e:
            logger.error(f"Error deleting duplicate blogs: {str(e)}")
            raise

        logger.info(f"Deleted {deleted} duplicate blogs")
        return deleted

    def keep_latest_blogs(self, keep_count: int) -> int:
        """Delete every blog beyond the newest `keep_count`, regardless of status."""
        if keep_count < 0:
            raise ValueError('keep_count must not be negative')

        try:
            cursor = (self.collection.find({}, {'_id': 1})
                      .sort('created_at', DESCENDING)
                      .skip(keep_count))
            deleted = self._delete_ids([doc['_id'] for doc in cursor])
        except Exception as e:
            logger.error(f"Error keeping latest {keep_count} blogs: {str(e)}")
            raise

        logger.info(f"Kept latest {keep_count} blogs, deleted {deleted}")
        return deleted

    def cap_published_blogs(self, max_count: int = RETENTION_SETTINGS['max_published_blogs']) -> int:
        """Remove the oldest published blogs until at most `max_count` remain."""
        published = {'status': BlogStatus.PUBLISHED.value}
        total = self.collection.count_documents(published)
        if total <= max_count:
            return 0

        cursor = (self.collection.find(published, {'_id': 1})
                  .sort('created_at', ASCENDING)
                  .limit(total - max_count))
        deleted = self._delete_ids([doc['_id'] for doc in cursor])
        logger.info(f"Cleaned up {deleted} old blogs to stay within {max_count} published")
        return deleted

    def delete_low_engagement_blogs(
        self,
        min_age_days: int = RETENTION_SETTINGS['low_engagement_min_age_days'],
        max_views: int = RETENTION_SETTINGS['low_engagement_max_views']
    ) -> int:
        """Delete blogs older than `min_age_days` with fewer than `max_views` views and no likes."""
        cutoff = utcnow() - timedelta(days=min_age_days)
        try:
            deleted = self._delete_matching({
                'created_at': {'$lt': cutoff},
                'view_count': {'$lt': max_views},
                'likes': {'$lte': 0}
            })
        except Exception as e:
            logger.error(f"Error deleting low engagement blogs: {str(e)}")
            raise

        logger.info(f"Deleted {deleted} low engagement blogs")
        return deleted

    def list_blogs_to_delete(self, days_old: int = RETENTION_SETTINGS['default_days_old']) -> List[Blog]:
        cutoff = utcnow() - timedelta(days=days_old)
        cursor = (self.collection.find({'created_at': {'$lt': cutoff}}, PREVIEW_FIELDS)
                  .sort('created_at', ASCENDING))
        return list(cursor)

    def get_stats(self) -> Dict[str, Any]:
        """Totals by status and category plus the oldest and newest blog dates."""
        by_status = {status.value: 0 for status in BlogStatus}
        for row in self.collection.aggregate([{'$group': {'_id': '$status', 'count': {'$sum': 1}}}]):
            by_status[row['_id']] = row['count']

        by_category = {
            row['_id']: row['count']
            for row in self.collection.aggregate([{'$group': {'_id': '$category', 'count': {'$sum': 1}}}])
        }

        oldest = self.collection.find_one({}, {'created_at': 1}, sort=[('created_at', ASCENDING)])
        newest = self.collection.find_one({}, {'created_at': 1}, sort=[('created_at', DESCENDING)])

        return {
            'total': self.collection.count_documents({}),
            'by_status': by_status,
            'by_category': by_category,
            'oldest': oldest['created_at'].isoformat() if oldest else None,
            'newest': newest['created_at'].isoformat() if newest else None
        }

    def get_cleanup_stats(self) -> CleanupStats:
        try:
            one_month_ago = utcnow() - relativedelta(months=1)
            duplicates = list(self.collection.aggregate([
                {'$group': {'_id': '$title', 'count': {'$sum': 1}}},
                {'$match': {'count': {'$gt': 1}}}
            ]))
            return {
                'total_blogs': self.collection.count_documents({}),
                'old_blogs': self.collection.count_documents({'created_at': {'$lt': one_month_ago}}),
                'duplicate_groups': len(duplicates),
                'last_updated': utcnow().isoformat()
            }
        except Exception as e:
            logger.error(f"Error getting cleanup stats: {str(e)}")
            raise

    def perform_cleanup(
        self,
        delete_old: bool = False,
        days_old: int = RETENTION_SETTINGS['default_days_old'],
        remove_duplicates: bool = False,
        categories: Optional[List[str]] = None
    ) -> CleanupResults:
        """Run the selected policies in order and report what each removed."""
        results: CleanupResults = {
            'old_blogs_deleted': 0,
            'duplicates_deleted': 0,
            'category_blogs_deleted': 0,
            'total_deleted': 0
        }

        if delete_old:
            results['old_blogs_deleted'] = self.delete_old_blogs(days_old)
        if remove_duplicates:
            results['duplicates_deleted'] = self.delete_duplicate_blogs()
        for category in categories or []:
            results['category_blogs_deleted'] += self.delete_blogs_by_category(category)

        results['total_deleted'] = (
            results['old_blogs_deleted']
            + results['duplicates_deleted']
            + results['category_blogs_deleted']
        )
        logger.info(f"Cleanup completed: {results['total_deleted']} blogs deleted")
        return results
