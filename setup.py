#!/usr/bin/env python3
"""
Setup script for gh-migrate-packages package.
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
    return "Migrate Packages - Migrate GitHub Packages between organizations"


setup(
    name="gh-migrate-packages",
    version="1.0.0",
    author="Package Migration Team",
    description="Export and migrate container, npm, Maven, NuGet and RubyGems packages between GitHub organizations",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    url="https://github.com/cvega/gh-migrate-packages",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: System :: Archiving :: Packaging",
    ],
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "click>=8.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "pytest-mock>=3.6",
            "respx>=0.20.0",
            "black>=21.0",
            "flake8>=3.8",
            "mypy>=0.800",
            "pylint>=2.8",
            "types-PyYAML",
        ],
    },
    entry_points={
        "console_scripts": [
            "migrate-packages=migrate_packages.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
