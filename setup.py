"""
Setup script for coursetree.

coursetree checks a directory of Markdown course lessons before a site
generator or learning platform ingests it:

1. Lesson parsing - front-matter (title, order, estimatedMinutes) + body
2. Module validation - titles, unique lesson order, durations
3. Course assembly - navigable tree with next/previous lesson links

The 'coursetree' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="coursetree",
    version="1.0.0",
    description="Validate and assemble Markdown course content into a navigable tree",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["coursetree", "coursetree.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Front-matter
        "PyYAML>=6.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
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
            "coursetree=coursetree.cli.main:run",
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
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Text Processing :: Markup :: Markdown",
    ],
    keywords="course lessons markdown front-matter validation education",
)
