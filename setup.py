"""
Setup script for learnsync.

learnsync is the offline-first data layer of a K-12 learning client. It
serves three roles:

1. Content resolution - remote API first, then local cache, bundled
   dataset, and finally a placeholder
2. Progress ledger - durable per-unit completion state on the device
3. Sync queue - ordered, at-least-once replay of progress changes

The 'learnsync' command exposes all three from the terminal.
"""

from setuptools import find_packages, setup

setup(
    name="learnsync",
    version="1.0.0",
    description="Offline-first content resolution and progress sync for K-12 learning clients",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="learnsync contributors",
    packages=find_packages(include=["learnsync", "learnsync.*"]),
    package_data={"learnsync": ["data/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "learnsync=learnsync.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="learning offline-first sync education cli",
)
