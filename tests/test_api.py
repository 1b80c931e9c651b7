"""Tests for the REST API (MongoDB replaced by mongomock, generation mocked)."""
import unittest
from datetime import timedelta
from unittest.mock import patch, MagicMock
import mongomock
from bson import ObjectId
from fastapi.testclient import TestClient
from auto_blogger.llm.generator import BlogGenerationError
from auto_blogger.pipeline.runner import BlogRunner, NoArticlesError
from auto_blogger.storage.blogs import build_blog_document
from auto_blogger.storage.db import ensure_indexes, utcnow
from auto_blogger.web.app import create_app
from auto_blogger.web.services import build_services


class APITestCase(unittest.TestCase):
    def setUp(self):
        self.database = mongomock.MongoClient().db
        self.runner = MagicMock()
        self.services = build_services(self.database, runner=self.runner)
        ensure_indexes(self.services.repository.collection, self.services.subscribers.collection)
        self.app = create_app(services=self.services, start_scheduler=False, connect_database=False)
        self.client = TestClient(self.app)

    def insert_blog(self, title, days_ago=0, **fields):
        counters = {k: fields.pop(k) for k in ('view_count', 'likes') if k in fields}
        document = build_blog_document(
            title=title,
            excerpt=f"{title} excerpt",
            content=f"{title} content",
            now=utcnow() - timedelta(days=days_ago),
            **fields
        )
        document.update(counters)
        return self.services.repository.create(document)


class TestBlogEndpoints(APITestCase):
    def test_create_blog(self):
        response = self.client.post('/api/blogs', json={
            'title': 'Hello From The API',
            'excerpt': 'Short excerpt',
            'content': 'Some words for the body',
            'tags': ['News'],
            'category': 'science'
        })

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['slug'], 'hello-from-the-api')
        self.assertEqual(data['tags'], ['news'])
        self.assertEqual(data['estimated_read_time'], 1)

    def test_create_duplicate_title_conflicts(self):
        body = {'title': 'Same Title', 'excerpt': 'e', 'content': 'c'}
        self.client.post('/api/blogs', json=body)
        response = self.client.post('/api/blogs', json=body)

        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()['success'])

    def test_create_missing_fields(self):
        response = self.client.post('/api/blogs', json={'excerpt': 'e', 'content': 'c'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Validation Error')

    def test_create_invalid_category(self):
        response = self.client.post('/api/blogs', json={
            'title': 'Bad Category Post', 'excerpt': 'e', 'content': 'c', 'category': 'sports'
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(response.json()['details']), 1)

    def test_list_blogs(self):
        for i in range(3):
            self.insert_blog(f"Listed Post {i}", days_ago=i)
        self.insert_blog('Hidden Draft Post', status='draft')

        response = self.client.get('/api/blogs', params={'limit': 2})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([b['title'] for b in data['blogs']], ['Listed Post 0', 'Listed Post 1'])
        self.assertNotIn('content', data['blogs'][0])
        self.assertIn('id', data['blogs'][0])
        self.assertEqual(data['pagination'], {
            'current_page': 1, 'total_pages': 2, 'total_blogs': 3, 'has_next': True, 'has_prev': False
        })
        self.assertEqual(data['filters']['current_filters']['sort'], 'newest')
        self.assertEqual(data['filters']['categories'], [{'name': 'general', 'count': 3}])

    def test_list_invalid_date(self):
        response = self.client.get('/api/blogs', params={'date_from': 'yesterday-ish'})
        self.assertEqual(response.status_code, 400)

    def test_get_blog_counts_view(self):
        self.insert_blog('Readable Post Title', tags=['ai'])
        self.insert_blog('Related Post Title', tags=['ai'])

        response = self.client.get('/api/blogs/readable-post-title')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['blog']['view_count'], 1)
        self.assertEqual([b['title'] for b in data['related_blogs']], ['Related Post Title'])

    def test_get_draft_not_found(self):
        self.insert_blog('Draft Only Post', status='draft')
        response = self.client.get('/api/blogs/draft-only-post')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Blog not found'})

    def test_like(self):
        self.insert_blog('Likeable Post Title')
        self.assertEqual(self.client.post('/api/blogs/likeable-post-title/like').json()['likes'], 1)
        self.assertEqual(self.client.post('/api/blogs/missing/like').status_code, 404)

    def test_featured_and_meta(self):
        self.insert_blog('Popular Post Title', days_ago=20, view_count=30, tags=['space'], category='science')
        self.insert_blog('Recent Post Title', tags=['ai'])

        popular = self.client.get('/api/blogs/featured/popular', params={'limit': 1}).json()
        self.assertEqual(popular[0]['title'], 'Popular Post Title')

        recent = self.client.get('/api/blogs/featured/recent').json()
        self.assertEqual([b['title'] for b in recent], ['Recent Post Title'])

        self.assertEqual(self.client.get('/api/blogs/meta/categories').json(), ['general', 'science'])
        self.assertEqual(self.client.get('/api/blogs/meta/tags').json(), ['ai', 'space'])

    def test_by_category_and_tag(self):
        self.insert_blog('Science Post Title', category='science', tags=['space'])
        self.insert_blog('General Post Title')

        data = self.client.get('/api/blogs/category/science').json()
        self.assertEqual([b['title'] for b in data['blogs']], ['Science Post Title'])
        self.assertEqual(data['total_blogs'], 1)

        data = self.client.get('/api/blogs/tag/space').json()
        self.assertEqual(data['tag'], 'space')
        self.assertEqual(len(data['blogs']), 1)

    def test_admin_stats(self):
        self.insert_blog('Stats Post Title', view_count=4, likes=2)
        data = self.client.get('/api/blogs/admin/stats').json()
        self.assertTrue(data['success'])
        self.assertEqual(data['total_views'], 4)
        self.assertIsInstance(data['recent_activity'][0]['created_at'], str)


class TestGenerateEndpoint(APITestCase):
    def test_generate(self):
        self.runner.generate_for_category.return_value = {
            '_id': ObjectId(), 'title': 'Generated Title', 'slug': 'generated-title',
            'excerpt': 'e', 'tags': ['ai'], 'category': 'technology', 'created_at': utcnow()
        }

        response = self.client.post('/api/blogs/admin/generate', json={'category': 'technology', 'topic': 'AI'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['blog']['slug'], 'generated-title')
        self.runner.generate_for_category.assert_called_once_with('technology', 'AI', 5)

    def test_generate_without_articles(self):
        self.runner.generate_for_category.side_effect = NoArticlesError('No articles found for category: science')
        response = self.client.post('/api/blogs/admin/generate', json={'category': 'science'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'No articles found for category: science')

    def test_generation_failure(self):
        self.runner.generate_for_category.side_effect = BlogGenerationError('model unavailable')
        response = self.client.post('/api/blogs/admin/generate', json={})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error'], 'Failed to generate blog: model unavailable')

    def test_generate_unknown_category(self):
        news_api = MagicMock()
        self.services.runner = BlogRunner(self.services.repository, news_api=news_api, generator=MagicMock())

        response = self.client.post('/api/blogs/admin/generate', json={'category': 'sports'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Validation Error')
        news_api.fetch_latest_news.assert_not_called()


class TestCleanupEndpoints(APITestCase):
    def test_delete_by_id(self):
        blog = self.insert_blog('Delete Me Post')
        response = self.client.delete(f"/api/cleanup/{blog['_id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.delete(f"/api/cleanup/{blog['_id']}").status_code, 404)

    def test_delete_invalid_id(self):
        response = self.client.delete('/api/cleanup/not-an-object-id')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid ID format')

    def test_delete_category(self):
        self.insert_blog('Science Post', category='science')
        response = self.client.delete('/api/cleanup/category/science')
        self.assertEqual(response.json()['deleted_count'], 1)

    def test_cleanup_old_and_preview(self):
        self.insert_blog('Old Post', days_ago=45)
        self.insert_blog('New Post')

        preview = self.client.get('/api/cleanup/cleanup/preview/30').json()
        self.assertEqual(preview['count'], 1)

        response = self.client.post('/api/cleanup/cleanup/old', json={'days_old': 30})
        self.assertEqual(response.json()['deleted_count'], 1)

    def test_keep_latest(self):
        for i in range(3):
            self.insert_blog(f"Post {i}", days_ago=i)
        response = self.client.post('/api/cleanup/cleanup/keep-latest', json={'keep_count': 1})
        self.assertEqual(response.json()['deleted_count'], 2)

    def test_keep_latest_rejects_negative(self):
        response = self.client.post('/api/cleanup/cleanup/keep-latest', json={'keep_count': -1})
        self.assertEqual(response.status_code, 400)

    def test_run_and_stats(self):
        self.insert_blog('Old Post', days_ago=45)
        results = self.client.post('/api/cleanup/cleanup/run', json={'delete_old': True}).json()['results']
        self.assertEqual(results['total_deleted'], 1)

        stats = self.client.get('/api/cleanup/stats').json()['stats']
        self.assertEqual(stats['total'], 0)

        report = self.client.get('/api/cleanup/cleanup/report').json()['stats']
        self.assertEqual(report['duplicate_groups'], 0)

    def test_run_with_empty_body_deletes_nothing(self):
        collection = self.services.repository.collection
        self.insert_blog('Old Post', days_ago=45)
        for slug in ('dup-post-1', 'dup-post-2'):
            document = build_blog_document(title='Dup Post', excerpt='e', content='c')
            document['slug'] = slug
            collection.insert_one(document)

        results = self.client.post('/api/cleanup/cleanup/run', json={}).json()['results']

        self.assertEqual(results['total_deleted'], 0)
        self.assertEqual(collection.count_documents({}), 3)


class TestSubscriptionEndpoints(APITestCase):
    @patch('auto_blogger.web.subscription_routes.send_subscription_emails')
    def test_subscribe(self, mock_send):
        response = self.client.post('/api/subscription/subscribe', json={'email': ' Reader@Example.com '})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['email_sent'])
        mock_send.assert_called_once_with('reader@example.com', 1)
        self.assertEqual(self.client.get('/api/subscription/count').json(), {'count': 1})

    @patch('auto_blogger.web.subscription_routes.send_subscription_emails')
    def test_duplicate_subscription(self, mock_send):
        self.client.post('/api/subscription/subscribe', json={'email': 'reader@example.com'})
        response = self.client.post('/api/subscription/subscribe', json={'email': 'READER@example.com'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Email already subscribed')

    def test_invalid_email(self):
        for body in ({}, {'email': 'no-at-sign'}):
            response = self.client.post('/api/subscription/subscribe', json=body)
            self.assertEqual(response.status_code, 400)

    @patch('auto_blogger.web.subscription_routes.send_subscription_emails', side_effect=OSError('smtp down'))
    def test_email_failure_still_subscribes(self, mock_send):
        response = self.client.post('/api/subscription/subscribe', json={'email': 'reader@example.com'})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['email_sent'])
        self.assertEqual(self.services.subscribers.count(), 1)


class TestSchedulerEndpoints(APITestCase):
    def setUp(self):
        super().setUp()
        self.services.scheduler = MagicMock()

    def test_status(self):
        self.services.scheduler.get_status.return_value = {'is_running': False}
        self.assertEqual(self.client.get('/api/scheduler/status').json(), {'is_running': False})

    def test_manual_triggers(self):
        self.client.post('/api/scheduler/run-weekly')
        self.client.post('/api/scheduler/run-trending')
        self.client.post('/api/scheduler/run-cleanup')

        self.services.scheduler.run_weekly_generation.assert_called_once()
        self.services.scheduler.run_trending_generation.assert_called_once()
        self.services.scheduler.run_manual_cleanup.assert_called_once()

    def test_cron_triggers(self):
        for path in ('/api/cron/weekly', '/api/cron/daily', '/api/cron/cleanup'):
            self.assertTrue(self.client.get(path).json()['success'])
        self.services.scheduler.run_weekly_generation.assert_called_once()
        self.services.scheduler.run_trending_generation.assert_called_once()
        self.services.scheduler.run_manual_cleanup.assert_called_once()


class TestAppBehaviour(APITestCase):
    def test_health(self):
        data = self.client.get('/health').json()
        self.assertEqual(data['status'], 'OK')
        self.assertIn('rss', data['memory'])
        self.assertFalse(data['scheduler']['is_running'])

    def test_unknown_route(self):
        response = self.client.get('/api/unknown/route/here')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {
            'success': False, 'error': 'Route not found', 'path': '/api/unknown/route/here', 'method': 'GET'
        })

    def test_unexpected_error(self):
        client = TestClient(self.app, raise_server_exceptions=False)
        with patch.object(self.services.repository, 'list_blogs', side_effect=RuntimeError('boom')):
            response = client.get('/api/blogs')
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])


if __name__ == '__main__':
    unittest.main()
