#!/usr/bin/env python3
"""
Setup script for the socnetkit package.

This setup.py provides a traditional installation method for the
socnetkit social network analysis library.
"""

from setuptools import setup, find_packages
import re

# Read the README file
def read_readme():
    """Read README.md for long description."""
    try:
        with open("README.md", "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return "Social network analysis: centrality, cohesion, clustering and layouts"

# Read version from __init__.py
def get_version():
    """Extract version from src/socnetkit/__init__.py."""
    try:
        with open("src/socnetkit/__init__.py", "r") as f:
            match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
        return match.group(1) if match else "0.1.0"
    except FileNotFoundError:
        return "0.1.0"

setup(
    name="socnetkit",
    version=get_version(),
    description="Social network analysis library: multiplex graph store, centrality and prestige indices, matrices, clustering and layouts",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Sociology",
    ],
    python_requires=">=3.9",
    install_requires=[
        "networkit>=11.0",
        "polars>=0.20.5",
        "numpy>=1.24.0",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.1.0",
            "black>=23.0",
            "mypy>=1.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
