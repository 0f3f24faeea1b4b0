"""
Entry point for running the review engine CLI as a module.

Usage:
    python -m review_engine.delivery evaluate "你好" "你好"
    python -m review_engine.delivery stats
    python -m review_engine.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
