"""
Auto Blogger - news-driven blog generation and publishing.

This module serves as the main entry point for the Auto Blogger service, which:
1. Pulls the latest news from GNews on a cron schedule
2. Uses an LLM to turn related articles into blog posts
3. Stores posts in MongoDB and serves them through a REST API

For detailed documentation, see README.md
"""
from auto_blogger.cli import cli

if __name__ == "__main__":
    cli()
