"""
setup.py

Packaging metadata and CLI entry point for rollup-stream.

Version: 1.0.0 — Streams the output of a bundling backend: options mapping or
configuration file in, a single-chunk push stream of bundle code (with an
optional inline source map) out. Ships the builtin backend, the hypothetical
in-memory plugin and the rollup-stream CLI.
"""
from setuptools import setup, find_packages

setup(
    name="rollup-stream",
    version="1.0.0",
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
            "pytest-asyncio",
            "hypothesis",
        ],
    },
    entry_points={
        "console_scripts": [
            "rollup-stream=cli:cli",
        ],
    },
    python_requires=">=3.8",
)
