#!/usr/bin/env python3
"""
Setup script for apt-repo-tool package.
"""

from setuptools import setup, find_packages
import os


# Read the README file for long description
def read_readme():
    """Read the README file."""
    readme_path = os.path.join(os.path.dirname(__file__), "README.md")
    if os.path.exists(readme_path):
        with open(readme_path, "r", encoding="utf-8") as f:
            return f.read()
    return "apt-repo-tool - Manage APT package repositories on the local filesystem"


setup(
    name="apt-repo-tool",
    version="1.0.0",
    description="Ingest Debian packages into APT repositories and generate signed repository metadata",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Archiving :: Packaging",
        "Topic :: System :: Software Distribution",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0.0",
        "click>=8.0.0",
        "python-debian>=0.1.49",
        "PGPy>=0.6.0; python_version < '3.13'",
        "PGPy13>=0.6.1rc1; python_version >= '3.13'",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "pytest-mock>=3.6",
            "black>=21.0",
            "flake8>=3.8",
            "mypy>=0.800",
            "pylint>=2.8",
        ],
    },
    entry_points={
        "console_scripts": [
            "apt-repo-tool=apt_repo_tool.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
