"""
setup.py

Packaging metadata and CLI entry point for multi-formatter.

Version: 0.2.0: adds per-language format commands derived from settings,
persisted conflict tracking between runs, and machine-readable run reports.
"""
from setuptools import setup, find_packages

setup(
    name="multi-formatter",
    version="0.2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "pydantic>=2.0",
        "PyYAML",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
        ],
    },
    entry_points={
        "console_scripts": [
            "multi-formatter=cli:cli",
        ],
    },
    python_requires=">=3.8",
)
