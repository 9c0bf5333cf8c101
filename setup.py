#!/usr/bin/env python3
"""Setup script for youtube-subscriptions."""
from setuptools import find_packages, setup

# Read version from package
with open("src/youtube_subscriptions/__init__.py", "r") as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

# Read long description from README
with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="youtube-subscriptions",
    version=version,
    description="Browse the latest videos of your YouTube subscriptions in a terminal",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "requests>=2.25.0",
        "feedparser>=6.0.0",
        "python-dateutil>=2.8.2",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",
        "listparser>=0.19",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "lint": [
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "youtube-subscriptions=youtube_subscriptions.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Video",
    ],
)
