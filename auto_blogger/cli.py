"""
Auto Blogger Command Line Interface.

This module provides the CLI for the Auto Blogger service. It handles:
1. Running the REST API together with the cron scheduler
2. Generating blogs on demand for categories, search queries or trending topics
3. Applying retention policies and reporting database statistics

Scheduled jobs run in America/New_York unless SCHEDULER_TIMEZONE says otherwise.

Example Usage:
    # Serve the API on the configured host and port
    auto-blogger serve

    # Generate one blog per scheduled category
    auto-blogger generate all

    # Generate a focused blog about a search term
    auto-blogger search "quantum computing"

    # Show the five newest published blogs
    auto-blogger list --limit 5

Environment Variables:
    MONGODB_URI: MongoDB connection string
    GNEWS_API_KEY: API key for GNews
    OPENAI_API_KEY: API key for OpenAI
    SMTP_SERVER, SMTP_PORT, SMTP_USERNAME, SMTP_PASSWORD: Subscription mail settings

For detailed configuration options, see config/settings.py
"""
import json
import os
import sys
import time
from datetime import datetime, timezone

import click
import uvicorn

from auto_blogger.config.settings import SERVER_SETTINGS, SYSTEM_SETTINGS, RETENTION_SETTINGS
from auto_blogger.logging_cfg.logger import setup_logger, print_metrics_summary
from auto_blogger.storage.blogs import serialize_blog
from auto_blogger.storage.db import connect, ensure_indexes
from auto_blogger.web.services import Services, build_services

# Set up logger
logger = setup_logger()

REQUIRED_ENV_VARS = ['MONGODB_URI', 'GNEWS_API_KEY', 'OPENAI_API_KEY']


def _connect_services() -> Services:
    database = connect()
    services = build_services(database)
    ensure_indexes(services.repository.collection, services.subscribers.collection)
    return services


def _log_summary(start_time: float) -> None:
    stats = {
        "runtime_seconds": round(time.time() - start_time, 2),
        "end_time_utc": datetime.now(timezone.utc).isoformat()
    }
    logger.info(print_metrics_summary())
    logger.info(f"SUMMARY: {json.dumps(stats)}")


def run_health_check() -> bool:
    """Check directories, environment variables and connectivity to MongoDB, GNews and OpenAI."""
    try:
        os.makedirs(SYSTEM_SETTINGS['log_dir'], exist_ok=True)

        missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
        if missing_vars:
            logger.error(f"Missing environment variables: {', '.join(missing_vars)}")
            return False

        from auto_blogger.feeds.gnews_api import check_gnews_connection
        from auto_blogger.llm.utils import check_openai_connection

        connect()
        check_gnews_connection()
        check_openai_connection()

        logger.info("Health check passed successfully")
        return True

    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return False


@click.group()
def cli():
    """Generate, publish and maintain news-driven blog posts."""


@cli.command()
@click.option('--host', default=SERVER_SETTINGS['host'], show_default=True)
@click.option('--port', default=SERVER_SETTINGS['port'], type=int, show_default=True)
@click.option('--scheduler/--no-scheduler', default=None, help='Override SCHEDULER_ENABLED')
def serve(host, port, scheduler):
    """Run the REST API and the cron scheduler."""
    from auto_blogger.web.app import create_app

    uvicorn.run(create_app(start_scheduler=scheduler), host=host, port=port)


@cli.command()
@click.argument('category', default='all')
@click.option('--topic', default=None, help='Focus topic for a single category')
@click.option('--max-articles', default=None, type=int, help='Articles to fetch')
def generate(category, topic, max_articles):
    """Generate a blog for CATEGORY, or one per scheduled category with 'all'."""
    start_time = time.time()
    services = _connect_services()
    try:
        if category == 'all':
            results = services.runner.generate_for_categories()
            for item in results['successful']:
                click.echo(f"[ok] {item['category']}: {item['title']}")
            for item in results['failed']:
                click.echo(f"[failed] {item['category']}: {item['error']}")
            if not results['successful']:
                sys.exit(1)
        else:
            blog = services.runner.generate_for_category(category, topic, max_articles)
            click.echo(f"Generated: {blog['title']} (/{blog['slug']})")
    except Exception as e:
        logger.error(f"Blog generation failed: {str(e)}")
        sys.exit(1)
    finally:
        _log_summary(start_time)


@cli.command()
@click.argument('query')
@click.option('--max-articles', default=None, type=int, help='Articles to fetch')
def search(query, max_articles):
    """Generate a focused blog about QUERY."""
    start_time = time.time()
    services = _connect_services()
    try:
        blog = services.runner.search_and_generate(query, max_articles)
        click.echo(f"Generated: {blog['title']} (/{blog['slug']})")
    except Exception as e:
        logger.error(f"Search generation failed: {str(e)}")
        sys.exit(1)
    finally:
        _log_summary(start_time)


@cli.command()
def trending():
    """Generate the trending-topic blog now."""
    start_time = time.time()
    services = _connect_services()
    blog = services.scheduler.run_trending_generation()
    _log_summary(start_time)
    if blog is None:
        click.echo("No trending blog was generated")
        sys.exit(1)
    click.echo(f"Generated: {blog['title']} (/{blog['slug']})")


@cli.command()
@click.option('--days-old', default=None, type=int, help='Delete blogs older than this many days')
@click.option('--keep-latest', default=None, type=int, help='Keep only the newest N blogs')
@click.option('--duplicates/--no-duplicates', default=False, help='Delete exact-title duplicates')
@click.option('--category', 'categories', multiple=True, help='Delete every blog in a category')
@click.option('--dry-run', is_flag=True, help='List what --days-old would delete')
def cleanup(days_old, keep_latest, duplicates, categories, dry_run):
    """Apply retention policies. Without options, runs the scheduled cleanup."""
    services = _connect_services()
    manager = services.cleanup_manager

    if dry_run:
        days = days_old if days_old is not None else RETENTION_SETTINGS['default_days_old']
        blogs = manager.list_blogs_to_delete(days)
        for blog in blogs:
            click.echo(f"{blog['created_at']:%Y-%m-%d}  {blog['title']}")
        click.echo(f"{len(blogs)} blogs older than {days} days")
        return

    if days_old is None and keep_latest is None and not duplicates and not categories:
        results = services.scheduler.run_manual_cleanup()
        if results is None:
            sys.exit(1)
        click.echo(json.dumps(results, indent=2))
        return

    results = manager.perform_cleanup(
        delete_old=days_old is not None,
        days_old=days_old if days_old is not None else RETENTION_SETTINGS['default_days_old'],
        remove_duplicates=duplicates,
        categories=list(categories)
    )
    if keep_latest is not None:
        results['total_deleted'] += manager.keep_latest_blogs(keep_latest)
    click.echo(json.dumps(results, indent=2))


@cli.command('list')
@click.option('--limit', default=10, type=int, show_default=True, help='Number of blogs to show')
def list_blogs(limit):
    """List the newest published blogs."""
    services = _connect_services()
    blogs, total = services.repository.list_blogs(limit=limit)
    for blog in blogs:
        click.echo(
            f"{blog['created_at']:%Y-%m-%d}  {blog['title']} (/{blog['slug']}) "
            f"views={blog.get('view_count', 0)} likes={blog.get('likes', 0)}"
        )
    click.echo(f"{len(blogs)} of {total} published blogs")


@cli.command()
def stats():
    """Print blog database statistics."""
    services = _connect_services()
    admin = services.repository.get_admin_stats()
    admin['recent_activity'] = [serialize_blog(blog) for blog in admin['recent_activity']]
    report = {
        'stats': services.cleanup_manager.get_stats(),
        'cleanup': services.cleanup_manager.get_cleanup_stats(),
        'blogs': admin
    }
    click.echo(json.dumps(report, indent=2))


@cli.command('test-email')
def test_email():
    """Send a test email to ADMIN_EMAIL to verify SMTP settings."""
    from auto_blogger.email.sender import send_test_email

    if not send_test_email():
        sys.exit(1)
    click.echo("Test email sent")


@cli.command('health-check')
def health_check():
    """Validate configuration and connectivity."""
    if not run_health_check():
        sys.exit(1)
    click.echo("OK")


if __name__ == "__main__":
    cli()
