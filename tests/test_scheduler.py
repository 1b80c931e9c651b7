"""Tests for scheduled generation, the re-entrancy guard and scheduled cleanup."""
import unittest
from datetime import timedelta
from unittest.mock import patch, MagicMock
import mongomock
import requests
from apscheduler.schedulers.background import BackgroundScheduler
from auto_blogger.cleanup.manager import BlogCleanupManager
from auto_blogger.config.settings import RETENTION_SETTINGS
from auto_blogger.pipeline.runner import BlogRunner
from auto_blogger.scheduler.jobs import BlogScheduler, WEEKLY_JOB_ID, CLEANUP_JOB_ID
from auto_blogger.storage.blogs import BlogRepository, build_blog_document
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import MAX_LIST_METRIC_LENGTH, get_metrics, reset_metrics, update_metrics


def make_article(title):
    return {
        'title': title,
        'description': f"{title} description",
        'content': None,
        'url': f"https://news.example.com/{title.replace(' ', '-').lower()}",
        'image': None,
        'published_at': '2024-05-01T10:00:00Z',
        'source': {'name': 'Reuters', 'url': None}
    }


def make_draft(title):
    return {
        'title': title,
        'excerpt': f"{title} excerpt",
        'content': f"{title} body text",
        'tags': ['technology'],
        'featured_image': None,
        'image_metadata': None
    }


WEEKLY_TITLES = ['Orbital factories open', 'Copper prices surge', 'Gene editing milestone']


class SchedulerTestCase(unittest.TestCase):
    def setUp(self):
        reset_metrics()
        self.collection = mongomock.MongoClient().db.blogs
        self.repository = BlogRepository(self.collection)
        self.news_api = MagicMock()
        self.generator = MagicMock()
        self.generator.model = 'test-model'
        self.generator.generate_metadata.return_value = None
        self.runner = BlogRunner(self.repository, news_api=self.news_api, generator=self.generator)
        self.cleanup_manager = MagicMock()
        self.scheduler = BlogScheduler(
            self.repository, self.cleanup_manager, self.runner,
            scheduler=BackgroundScheduler()
        )

        sleep_patcher = patch('auto_blogger.scheduler.jobs.time.sleep')
        self.mock_sleep = sleep_patcher.start()
        self.addCleanup(sleep_patcher.stop)

    def insert_blog(self, title, days_ago=0, **counters):
        document = build_blog_document(
            title=title, excerpt='excerpt', content='content',
            now=utcnow() - timedelta(days=days_ago)
        )
        document.update(counters)
        self.collection.insert_one(document)


class TestWeeklyGeneration(SchedulerTestCase):
    def setUp(self):
        super().setUp()
        self.news_api.fetch_latest_news.side_effect = [
            [make_article('Space manufacturing startup')],
            [make_article('Metals market rally')],
            [make_article('Biology research result')],
        ]
        self.generator.generate_blog_post.side_effect = [make_draft(t) for t in WEEKLY_TITLES]

    def test_generates_one_blog_per_category(self):
        blogs = self.scheduler.generate_weekly_blogs()

        self.assertEqual([b['title'] for b in blogs], WEEKLY_TITLES)
        self.assertEqual([b['category'] for b in blogs], ['technology', 'business', 'science'])
        self.assertTrue(blogs[0]['generation_info']['scheduled_generation'])
        self.assertEqual(self.collection.count_documents({}), 3)
        self.cleanup_manager.cap_published_blogs.assert_called_once_with(100)
        self.assertEqual(get_metrics()['blogs_generated'], 3)

    def test_similar_recent_blog_skipped(self):
        self.insert_blog('Orbital factories open for business', days_ago=2)

        blogs = self.scheduler.generate_weekly_blogs()

        self.assertEqual([b['title'] for b in blogs], WEEKLY_TITLES[1:])
        self.assertEqual(get_metrics()['similar_blogs_skipped'], 1)

    def test_category_failure_does_not_stop_run(self):
        self.news_api.fetch_latest_news.side_effect = [
            RuntimeError('quota exceeded'),
            [make_article('Metals market rally')],
            [make_article('Biology research result')],
        ]
        self.generator.generate_blog_post.side_effect = [make_draft(t) for t in WEEKLY_TITLES[1:]]

        blogs = self.scheduler.generate_weekly_blogs()

        self.assertEqual(len(blogs), 2)
        self.assertEqual(get_metrics()['failed_categories'], ['technology'])
        self.cleanup_manager.cap_published_blogs.assert_called_once()

    def test_empty_category_skipped(self):
        self.news_api.fetch_latest_news.side_effect = [[], [], [make_article('Biology research result')]]
        self.generator.generate_blog_post.side_effect = [make_draft(WEEKLY_TITLES[2])]

        blogs = self.scheduler.generate_weekly_blogs()

        self.assertEqual([b['category'] for b in blogs], ['science'])

    def test_waits_between_blogs(self):
        self.scheduler.generate_weekly_blogs()
        self.assertEqual(self.mock_sleep.call_count, 3)


class TestReentrancyGuard(SchedulerTestCase):
    def test_run_skipped_while_another_in_progress(self):
        self.scheduler._generation_lock.acquire()
        try:
            self.assertTrue(self.scheduler.is_running)
            self.assertIsNone(self.scheduler.generate_weekly_blogs())
            self.assertIsNone(self.scheduler.generate_trending_blog())
        finally:
            self.scheduler._generation_lock.release()

        self.news_api.fetch_latest_news.assert_not_called()
        self.news_api.search_news.assert_not_called()
        self.assertEqual(get_metrics()['runs_skipped'], 2)

    def test_lock_released_after_failure(self):
        self.news_api.search_news.side_effect = RuntimeError('network down')

        self.assertIsNone(self.scheduler.generate_trending_blog())

        self.assertFalse(self.scheduler.is_running)
        self.assertEqual(get_metrics()['generation_failures'], 1)


class TestTrendingGeneration(SchedulerTestCase):
    @patch('auto_blogger.scheduler.jobs.random.choice', return_value='AI')
    def test_trending_blog_tagged_with_keyword(self, mock_choice):
        self.news_api.search_news.return_value = [make_article('AI models everywhere')]
        self.generator.generate_blog_post.return_value = make_draft('Machine learning reaches phones')

        blog = self.scheduler.generate_trending_blog()

        self.news_api.search_news.assert_called_once_with('AI', 'en', 6)
        self.generator.generate_blog_post.assert_called_once_with(
            self.news_api.search_news.return_value, 'Trending: AI'
        )
        self.assertEqual(blog['category'], 'technology')
        self.assertIn('trending', blog['tags'])
        self.assertIn('ai', blog['tags'])
        self.assertTrue(blog['generation_info']['trending_blog'])

    def test_no_articles_returns_none(self):
        self.news_api.search_news.return_value = []
        self.assertIsNone(self.scheduler.generate_trending_blog())
        self.generator.generate_blog_post.assert_not_called()

    def test_similar_trending_blog_skipped(self):
        self.insert_blog('Machine learning reaches cars')
        self.news_api.search_news.return_value = [make_article('AI models everywhere')]
        self.generator.generate_blog_post.return_value = make_draft('Machine learning reaches phones')

        self.assertIsNone(self.scheduler.generate_trending_blog())
        self.assertEqual(self.collection.count_documents({}), 1)


class TestScheduledCleanup(SchedulerTestCase):
    def setUp(self):
        super().setUp()
        self.scheduler.cleanup_manager = BlogCleanupManager(self.collection)

    @patch.dict(RETENTION_SETTINGS, {'cleanup_keep_latest': 2})
    def test_cleanup_applies_all_policies(self):
        self.insert_blog('Ancient', days_ago=70, view_count=50, likes=3)
        self.insert_blog('Ignored', days_ago=20, view_count=0, likes=0)
        for i in range(1, 4):
            self.insert_blog(f"Keep {i}", days_ago=i, view_count=10, likes=1)

        report = self.scheduler.run_cleanup_tasks()

        self.assertEqual(report, {
            'total_before': 5,
            'old_deleted': 1,
            'low_engagement_deleted': 1,
            'excess_deleted': 1,
            'total_after': 2
        })
        titles = sorted(doc['title'] for doc in self.collection.find())
        self.assertEqual(titles, ['Keep 1', 'Keep 2'])
        self.assertIsNotNone(get_metrics()['last_cleanup'])

    def test_cleanup_failure_returns_none(self):
        self.scheduler.cleanup_manager = MagicMock()
        self.scheduler.cleanup_manager.get_stats.side_effect = RuntimeError('db down')
        self.assertIsNone(self.scheduler.run_cleanup_tasks())


class TestSchedulerStatus(SchedulerTestCase):
    def test_status_after_registering_jobs(self):
        self.scheduler.register_jobs()

        status = self.scheduler.get_status()

        self.assertFalse(status['is_running'])
        self.assertFalse(status['scheduler_running'])
        self.assertTrue(status['weekly_schedule_active'])
        self.assertTrue(status['daily_schedule_active'])
        self.assertTrue(status['cleanup_schedule_active'])
        self.assertEqual(status['schedules']['weekly'], '0 9 * * sun')
        self.assertIn('blogs_generated', status['metrics'])

    def test_registered_job_ids(self):
        self.scheduler.register_jobs()
        ids = [job.id for job in self.scheduler.scheduler.get_jobs()]
        self.assertIn(WEEKLY_JOB_ID, ids)
        self.assertIn(CLEANUP_JOB_ID, ids)

    def test_status_metrics_are_a_copy(self):
        update_metrics('failed_categories', ['science'])

        status = self.scheduler.get_status()
        status['metrics']['failed_categories'].append('business')

        self.assertEqual(get_metrics()['failed_categories'], ['science'])

    def test_failed_categories_keep_newest_entries(self):
        for i in range(MAX_LIST_METRIC_LENGTH + 10):
            update_metrics('failed_categories', [f"category-{i}"])

        failed = get_metrics()['failed_categories']
        self.assertEqual(len(failed), MAX_LIST_METRIC_LENGTH)
        self.assertEqual(failed[-1], f"category-{MAX_LIST_METRIC_LENGTH + 9}")

    def test_status_without_jobs(self):
        status = self.scheduler.get_status()
        self.assertFalse(status['weekly_schedule_active'])
        self.assertIsNone(status['next_weekly_run'])

    @patch('auto_blogger.scheduler.jobs.requests.get', side_effect=requests.exceptions.ConnectionError('down'))
    def test_keep_alive_failure_is_logged(self, mock_get):
        with patch('auto_blogger.scheduler.jobs.logger') as mock_logger:
            self.scheduler.keep_alive()
        mock_logger.warning.assert_called_once()


if __name__ == '__main__':
    unittest.main()
