# Configuration file for Auto Blogger
# This file contains configurable settings for the blog generation service

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# System-wide settings
SYSTEM_SETTINGS = {
    'environment': os.getenv('APP_ENV', 'development'),  # development, production
    'log_level': os.getenv('LOG_LEVEL', 'INFO'),          # DEBUG, INFO, WARNING, ERROR, CRITICAL
    'log_dir': os.getenv('LOG_DIR', 'logs'),
    'timezone': os.getenv('APP_TIMEZONE', 'America/New_York'),
    'request_timeout': 30,
    'max_retries': 3,
}

# MongoDB settings
DATABASE_SETTINGS = {
    'uri': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/auto-blogger'),
    'database': os.getenv('MONGODB_DB', 'auto-blogger'),
    'blogs_collection': 'blogs',
    'subscribers_collection': 'subscribers',
    'server_selection_timeout_ms': 5000,
}

# GNews API Configuration
GNEWS_CONFIG = {
    'api_key': os.getenv('GNEWS_API_KEY'),
    'base_url': 'https://gnews.io/api/v4',
    'language': 'en',
    'max_articles_per_query': 10,
    'articles_per_category': 5,     # Used when collecting top stories across categories
}

# LLM settings
LLM_SETTINGS = {
    'api_key': os.getenv('OPENAI_API_KEY'),
    'model': os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
    'max_tokens': 2000,
    'temperature': 0.7,
    'max_retries': 3,
    'retry_base_delay': 1.0,
}

# Generation settings
GENERATION_SETTINGS = {
    'scheduled_categories': ['technology', 'business', 'science'],
    'weekly_articles_per_category': 8,
    'trending_articles': 6,
    'manual_articles': 5,
    'search_articles': 8,
    'max_group_size': 4,
    'max_groups': 2,
    'similar_lookback_days': 7,
    'delay_between_blogs': float(os.getenv('BLOG_GENERATION_DELAY', '3')),  # seconds, avoids LLM rate limits
    'generate_metadata': _env_bool('GENERATE_METADATA', True),
}

# Cron schedules (crontab syntax, named weekdays avoid APScheduler's Monday-first numbering)
SCHEDULE_SETTINGS = {
    'enabled': _env_bool('SCHEDULER_ENABLED', True),
    'timezone': os.getenv('SCHEDULER_TIMEZONE', 'America/New_York'),
    'weekly_cron': os.getenv('WEEKLY_CRON', '0 9 * * sun'),
    'daily_cron': os.getenv('DAILY_CRON', '0 6 * * *'),
    'cleanup_cron': os.getenv('CLEANUP_CRON', '0 2 * * sat'),
    'misfire_grace_time': 900,
    'keepalive_url': os.getenv('KEEPALIVE_URL'),
    'keepalive_minutes': 14,
}

# Retention policies
RETENTION_SETTINGS = {
    'max_published_blogs': 100,     # Cap applied after weekly generation
    'cleanup_max_age_days': 60,     # Scheduled cleanup deletes older posts
    'cleanup_keep_latest': 50,      # Scheduled cleanup keeps this many posts
    'low_engagement_min_age_days': 14,
    'low_engagement_max_views': 5,
    'default_days_old': 30,
}

# Email settings
EMAIL_SETTINGS = {
    'smtp_server': os.getenv('SMTP_SERVER', 'smtp.gmail.com'),
    'smtp_port': int(os.getenv('SMTP_PORT', '587')),
    'smtp_username': os.getenv('SMTP_USERNAME'),
    'smtp_password': os.getenv('SMTP_PASSWORD'),
    'sender_email': os.getenv('SENDER_EMAIL') or os.getenv('SMTP_USERNAME'),
    'admin_email': os.getenv('ADMIN_EMAIL'),
    'sender_name': 'Auto Blogger',
}

# HTTP server settings
SERVER_SETTINGS = {
    'host': os.getenv('HOST', '0.0.0.0'),
    'port': int(os.getenv('PORT', '5000')),
    'cors_origins': [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()],
}


def is_production() -> bool:
    return SYSTEM_SETTINGS['environment'] == 'production'
