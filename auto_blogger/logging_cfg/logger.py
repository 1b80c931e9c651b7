import copy
import logging
import os
import sys
from concurrent_log_handler import ConcurrentRotatingFileHandler
from datetime import datetime
from typing import Dict, Any
from dateutil import tz as dateutil_tz
from auto_blogger.config.settings import SYSTEM_SETTINGS

LOCAL_TZ = dateutil_tz.gettz(SYSTEM_SETTINGS['timezone']) or dateutil_tz.UTC

# Generation run metrics
_DEFAULT_METRICS = {
    'runs_started': 0,
    'runs_skipped': 0,
    'blogs_generated': 0,
    'similar_blogs_skipped': 0,
    'generation_failures': 0,
    'failed_categories': [],
    'blogs_deleted': 0,
    'last_run': None,
    'last_cleanup': None,
}

RUN_METRICS: Dict[str, Any] = copy.deepcopy(_DEFAULT_METRICS)

# List metrics keep only their newest entries
MAX_LIST_METRIC_LENGTH = 50


def update_metrics(metric_name: str, value: Any) -> None:
    """Update the metrics dictionary with a new value."""
    if isinstance(value, bool):
        RUN_METRICS[metric_name] = value
    elif isinstance(value, (int, float)):
        if metric_name not in RUN_METRICS or RUN_METRICS[metric_name] is None:
            RUN_METRICS[metric_name] = 0
        RUN_METRICS[metric_name] += value
    elif isinstance(value, (list, set)):
        if metric_name not in RUN_METRICS:
            RUN_METRICS[metric_name] = []
        RUN_METRICS[metric_name].extend(value)
        del RUN_METRICS[metric_name][:-MAX_LIST_METRIC_LENGTH]
    elif isinstance(value, dict):
        if metric_name not in RUN_METRICS:
            RUN_METRICS[metric_name] = {}
        RUN_METRICS[metric_name].update(value)
    else:
        RUN_METRICS[metric_name] = value


def get_metrics() -> Dict:
    """Get the current metrics."""
    return RUN_METRICS


def reset_metrics() -> None:
    """Reset all metrics to their default values."""
    RUN_METRICS.clear()
    RUN_METRICS.update(copy.deepcopy(_DEFAULT_METRICS))


def print_metrics_summary() -> str:
    """Build a summary of the metrics from the current process."""
    stats = []
    stats.append("Blog Generation Summary:")
    stats.append(f"├─ Runs started: {RUN_METRICS['runs_started']}")
    stats.append(f"├─ Runs skipped (already running): {RUN_METRICS['runs_skipped']}")
    stats.append(f"├─ Blogs generated: {RUN_METRICS['blogs_generated']}")
    stats.append(f"├─ Similar blogs skipped: {RUN_METRICS['similar_blogs_skipped']}")
    stats.append(f"├─ Blogs deleted by retention: {RUN_METRICS['blogs_deleted']}")
    stats.append(f"└─ Generation failures: {RUN_METRICS['generation_failures']}")

    if RUN_METRICS['failed_categories']:
        stats.append(f"\nFailed categories ({len(RUN_METRICS['failed_categories'])}):")
        for category in RUN_METRICS['failed_categories'][:5]:
            stats.append(f"├─ {category}")

    return "\n".join(stats)


class TimeZoneFormatter(logging.Formatter):
    """Formatter rendering timestamps in the application time zone."""

    def converter(self, timestamp):
        dt = datetime.fromtimestamp(timestamp, dateutil_tz.UTC)
        return dt.astimezone(LOCAL_TZ)

    def formatTime(self, record, datefmt=None):
        dt = self.converter(record.created)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime('%Y-%m-%d %H:%M:%S,%f %Z')


def setup_logger(name='auto_blogger', level=None):
    """
    Set up and configure the logger with both console and file handlers.

    Args:
        name (str): Logger name
        level (str): Log level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        logging.Logger: Configured logger instance
    """
    log_dir = SYSTEM_SETTINGS['log_dir']
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)

    # Avoid duplicate handlers if logger was already set up
    if logger.handlers:
        return logger

    if level is None:
        level = SYSTEM_SETTINGS['log_level']
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger.setLevel(level)

    formatter = TimeZoneFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    today = datetime.now(LOCAL_TZ).strftime('%Y%m%d')
    log_filename = os.path.join(log_dir, f'auto_blogger_{today}.log')

    # Scheduler threads and uvicorn workers share the file
    file_handler = ConcurrentRotatingFileHandler(
        log_filename,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
