"""Cron-driven blog generation and cleanup."""
import copy
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional
import pytz
import requests
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from auto_blogger.config.settings import (
    GENERATION_SETTINGS,
    RETENTION_SETTINGS,
    SCHEDULE_SETTINGS,
    SYSTEM_SETTINGS
)
from auto_blogger.core.constants import TRENDING_KEYWORDS
from auto_blogger.core.types import Blog
from auto_blogger.cleanup.manager import BlogCleanupManager
from auto_blogger.feeds.grouping import group_articles_by_topic
from auto_blogger.pipeline.runner import BlogRunner
from auto_blogger.storage.blogs import BlogRepository
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import setup_logger, update_metrics, get_metrics

logger = setup_logger()

WEEKLY_JOB_ID = 'weekly_blog_generation'
DAILY_JOB_ID = 'daily_trending_blog'
CLEANUP_JOB_ID = 'weekly_blog_cleanup'
KEEPALIVE_JOB_ID = 'keep_alive'
TRENDING_CATEGORY = 'technology'


class BlogScheduler:
    """
    Runs weekly per-category generation, a daily trending post and weekly cleanup.

    Generation runs share one lock, so a run that starts while another is in
    progress is skipped rather than queued.
    """

    def __init__(
        self,
        repository: BlogRepository,
        cleanup_manager: BlogCleanupManager,
        runner: BlogRunner,
        scheduler: Optional[BackgroundScheduler] = None
    ):
        self.repository = repository
        self.cleanup_manager = cleanup_manager
        self.runner = runner
        self.timezone = pytz.timezone(SCHEDULE_SETTINGS['timezone'])
        self.scheduler = scheduler or BackgroundScheduler(daemon=True, timezone=self.timezone)
        self._generation_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._generation_lock.locked()

    @property
    def generator(self):
        return self.runner.generator

    @property
    def news_api(self):
        return self.runner.news_api

    def _add_cron_job(self, func: Callable, crontab: str, job_id: str) -> None:
        self.scheduler.add_job(
            func,
            trigger=CronTrigger.from_crontab(crontab, timezone=self.timezone),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=SCHEDULE_SETTINGS['misfire_grace_time']
        )

    def register_jobs(self) -> None:
        logger.info(f"Scheduling weekly blog generation ({SCHEDULE_SETTINGS['weekly_cron']})")
        self._add_cron_job(self.generate_weekly_blogs, SCHEDULE_SETTINGS['weekly_cron'], WEEKLY_JOB_ID)

        logger.info(f"Scheduling daily trending blog ({SCHEDULE_SETTINGS['daily_cron']})")
        self._add_cron_job(self.generate_trending_blog, SCHEDULE_SETTINGS['daily_cron'], DAILY_JOB_ID)

        logger.info(f"Scheduling weekly cleanup ({SCHEDULE_SETTINGS['cleanup_cron']})")
        self._add_cron_job(self.run_cleanup_tasks, SCHEDULE_SETTINGS['cleanup_cron'], CLEANUP_JOB_ID)

        if SCHEDULE_SETTINGS['keepalive_url']:
            self.scheduler.add_job(
                self.keep_alive,
                trigger=IntervalTrigger(minutes=SCHEDULE_SETTINGS['keepalive_minutes']),
                id=KEEPALIVE_JOB_ID,
                replace_existing=True,
                misfire_grace_time=SCHEDULE_SETTINGS['misfire_grace_time']
            )

    def start(self) -> None:
        self.register_jobs()
        self.scheduler.start()
        logger.info("Blog scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Blog scheduler stopped")

    def keep_alive(self) -> None:
        url = SCHEDULE_SETTINGS['keepalive_url']
        try:
            response = requests.get(url, timeout=SYSTEM_SETTINGS['request_timeout'])
            logger.debug(f"Keep-alive ping to {url}: {response.status_code}")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Keep-alive ping failed: {str(e)}")

    def _run_exclusive(self, name: str, func: Callable[[], Any]) -> Any:
        if not self._generation_lock.acquire(blocking=False):
            logger.info(f"Blog generation already in progress, skipping {name}")
            update_metrics('runs_skipped', 1)
            return None

        try:
            update_metrics('runs_started', 1)
            update_metrics('last_run', utcnow().isoformat())
            return func()
        except Exception as e:
            logger.error(f"Error in {name}: {str(e)}")
            update_metrics('generation_failures', 1)
            return None
        finally:
            self._generation_lock.release()

    def check_for_similar_blog(self, title: str) -> bool:
        similar = self.repository.find_similar_recent(title, GENERATION_SETTINGS['similar_lookback_days'])
        return similar is not None

    def generate_weekly_blogs(self) -> Optional[List[Blog]]:
        """Generate posts for every scheduled category. Returns None when skipped."""
        return self._run_exclusive('weekly blog generation', self._generate_weekly)

    def _generate_weekly(self) -> List[Blog]:
        generated: List[Blog] = []
        delay = GENERATION_SETTINGS['delay_between_blogs']

        for category in GENERATION_SETTINGS['scheduled_categories']:
            try:
                logger.info(f"Generating blog for category: {category}")
                articles = self.runner.fetch_category_articles(
                    category, GENERATION_SETTINGS['weekly_articles_per_category']
                )
                if not articles:
                    logger.info(f"No articles found for category: {category}")
                    continue

                groups = group_articles_by_topic(
                    articles,
                    max_group_size=GENERATION_SETTINGS['max_group_size'],
                    max_groups=GENERATION_SETTINGS['max_groups']
                )
                for group in groups:
                    draft = self.generator.generate_blog_post(group['articles'], group['topic'])

                    if self.check_for_similar_blog(draft['title']):
                        logger.info(f"Similar blog already exists, skipping: {draft['title']}")
                        update_metrics('similar_blogs_skipped', 1)
                        continue

                    blog = self.runner.publish(
                        draft, group['articles'], category, group['topic'],
                        scheduled_generation=True
                    )
                    generated.append(blog)
                    logger.info(f"Generated blog: {blog['title']}")

                    if delay:
                        time.sleep(delay)
            except Exception as e:
                logger.error(f"Error generating blog for category {category}: {str(e)}")
                update_metrics('generation_failures', 1)
                update_metrics('failed_categories', [category])

        logger.info(f"Weekly blog generation completed. Generated {len(generated)} blogs.")
        self.cleanup_manager.cap_published_blogs(RETENTION_SETTINGS['max_published_blogs'])
        return generated

    def generate_trending_blog(self) -> Optional[Blog]:
        """Generate one post about a random trending keyword. Returns None when nothing was stored."""
        return self._run_exclusive('trending blog generation', self._generate_trending)

    def _generate_trending(self) -> Optional[Blog]:
        keyword = random.choice(TRENDING_KEYWORDS)
        logger.info(f"Generating trending topic blog for: {keyword}")

        articles = self.news_api.search_news(keyword, 'en', GENERATION_SETTINGS['trending_articles'])
        if not articles:
            logger.info("No trending articles found")
            return None

        topic = f"Trending: {keyword}"
        draft = self.generator.generate_blog_post(articles, topic)

        if self.check_for_similar_blog(draft['title']):
            logger.info("Similar trending blog already exists, skipping")
            update_metrics('similar_blogs_skipped', 1)
            return None

        blog = self.runner.publish(
            draft, articles, TRENDING_CATEGORY, topic,
            extra_tags=['trending', keyword.lower()],
            scheduled_generation=True,
            trending_blog=True
        )
        logger.info(f"Generated trending blog: {blog['title']}")
        return blog

    def run_cleanup_tasks(self) -> Optional[Dict[str, int]]:
        """Apply the scheduled retention policies. Returns None if cleanup failed."""
        try:
            logger.info("Starting automatic blog cleanup...")
            total_before = self.cleanup_manager.get_stats()['total']
            logger.info(f"Total blogs before cleanup: {total_before}")

            deleted_old = self.cleanup_manager.delete_old_blogs(RETENTION_SETTINGS['cleanup_max_age_days'])
            deleted_low = self.cleanup_manager.delete_low_engagement_blogs()

            deleted_excess = 0
            keep = RETENTION_SETTINGS['cleanup_keep_latest']
            if self.repository.count() > keep:
                deleted_excess = self.cleanup_manager.keep_latest_blogs(keep)

            total_after = self.cleanup_manager.get_stats()['total']
            update_metrics('last_cleanup', utcnow().isoformat())
            logger.info(f"Cleanup completed! Total blogs now: {total_after}")

            return {
                'total_before': total_before,
                'old_deleted': deleted_old,
                'low_engagement_deleted': deleted_low,
                'excess_deleted': deleted_excess,
                'total_after': total_after
            }
        except Exception as e:
            logger.error(f"Cleanup task failed: {str(e)}")
            return None

    def run_weekly_generation(self) -> Optional[List[Blog]]:
        logger.info("Manually triggering weekly blog generation...")
        return self.generate_weekly_blogs()

    def run_trending_generation(self) -> Optional[Blog]:
        logger.info("Manually triggering trending blog generation...")
        return self.generate_trending_blog()

    def run_manual_cleanup(self) -> Optional[Dict[str, int]]:
        logger.info("Manually triggering blog cleanup...")
        return self.run_cleanup_tasks()

    def _next_run(self, job_id: str) -> Optional[str]:
        job = self.scheduler.get_job(job_id)
        next_run = getattr(job, 'next_run_time', None) if job else None
        return next_run.isoformat() if next_run else None

    def get_status(self) -> Dict[str, Any]:
        return {
            'is_running': self.is_running,
            'scheduler_running': self.scheduler.running,
            'weekly_schedule_active': self.scheduler.get_job(WEEKLY_JOB_ID) is not None,
            'daily_schedule_active': self.scheduler.get_job(DAILY_JOB_ID) is not None,
            'cleanup_schedule_active': self.scheduler.get_job(CLEANUP_JOB_ID) is not None,
            'next_weekly_run': self._next_run(WEEKLY_JOB_ID),
            'next_daily_run': self._next_run(DAILY_JOB_ID),
            'next_cleanup_run': self._next_run(CLEANUP_JOB_ID),
            'schedules': {
                'weekly': SCHEDULE_SETTINGS['weekly_cron'],
                'daily': SCHEDULE_SETTINGS['daily_cron'],
                'cleanup': SCHEDULE_SETTINGS['cleanup_cron'],
                'timezone': SCHEDULE_SETTINGS['timezone']
            },
            'metrics': copy.deepcopy(get_metrics())
        }
