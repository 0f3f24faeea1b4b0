"""
Setup script for review-engine.

Review Engine is the assessment and scheduling core of a vocabulary
and pronunciation trainer. It serves three roles:

1. Evaluator - Scores spoken or typed attempts against the expected text
2. Scheduler - SM-2 spaced repetition over per-item review records
3. Planner - Progress statistics and time-boxed study sessions

The 'review-engine' command is the terminal entry point.
"""

from setuptools import find_packages, setup

setup(
    name="review-engine",
    version="1.0.0",
    description="Pronunciation assessment and SM-2 review scheduling engine",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["review_engine", "review_engine.*"]),
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Text similarity
        "rapidfuzz>=3.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "review-engine=review_engine.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 pronunciation education",
)
