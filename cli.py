"""
Auto Blogger CLI Entry Point.

This module provides access to the Auto Blogger command line interface.
Execute this script directly to serve the API or generate blogs:

    python cli.py serve
    python cli.py generate all

For configuration options and detailed usage, see README.md
"""
from auto_blogger.cli import cli

if __name__ == "__main__":
    cli()
