"""Wiring of storage, generation and scheduling objects shared by the API."""
from typing import Optional
from fastapi import Request
from pymongo.database import Database
from auto_blogger.cleanup.manager import BlogCleanupManager
from auto_blogger.pipeline.runner import BlogRunner
from auto_blogger.scheduler.jobs import BlogScheduler
from auto_blogger.storage.blogs import BlogRepository
from auto_blogger.storage.db import get_blog_collection, get_database, get_subscriber_collection
from auto_blogger.storage.subscribers import SubscriberStore


class Services:
    def __init__(
        self,
        repository: BlogRepository,
        cleanup_manager: BlogCleanupManager,
        runner: BlogRunner,
        scheduler: BlogScheduler,
        subscribers: SubscriberStore
    ):
        self.repository = repository
        self.cleanup_manager = cleanup_manager
        self.runner = runner
        self.scheduler = scheduler
        self.subscribers = subscribers


def build_services(database: Optional[Database] = None, runner: Optional[BlogRunner] = None) -> Services:
    """Create the service objects on top of a database (the configured one by default)."""
    database = database if database is not None else get_database()
    repository = BlogRepository(get_blog_collection(database))
    cleanup_manager = BlogCleanupManager(repository.collection)
    runner = runner or BlogRunner(repository)
    scheduler = BlogScheduler(repository, cleanup_manager, runner)
    subscribers = SubscriberStore(get_subscriber_collection(database))
    return Services(repository, cleanup_manager, runner, scheduler, subscribers)


def get_services(request: Request) -> Services:
    return request.app.state.services
