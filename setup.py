#!/usr/bin/env python3
"""
Setup configuration for gogomedia-client
Session handling and media-list synchronization for the GoGoMedia service
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "aiohttp>=3.9.1",
    "click>=8.1.7",
    "colorama>=0.4.6",
    "pyyaml>=6.0.1",
    "python-dotenv>=1.0.0",
]

setup(
    name="gogomedia-client",
    version="0.1.0",
    author="GoGoMedia Team",
    description="Client-side session and media catalog synchronization for the GoGoMedia service",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["gogomedia", "gogomedia.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Framework :: AsyncIO",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gogomedia=gogomedia.cli:cli",
        ],
    },
    keywords="media catalog client session sync asyncio",
)
