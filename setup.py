#!/usr/bin/env python3
# =============================================================================
#  sassbuf: setup.py
#
#  The version lives in sassbuf/__init__.py and the runtime requirements in
#  requirements.txt, so both have a single source of truth.
#
#  For development:
#      pip install -e ".[dev]"
#      python -m pytest
# =============================================================================

from __future__ import annotations

import re
from pathlib import Path

from setuptools import setup, find_packages

# ---------------------------------------------------------------------------
#  Read version from the package so we have a single source of truth.
# ---------------------------------------------------------------------------
_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract ``__version__`` from sassbuf/__init__.py."""
    init = _HERE / "sassbuf" / "__init__.py"
    text = init.read_text(encoding="utf-8")
    match = re.search(r'^__version__(?::\s*str)?\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _read_long_description() -> str:
    """Read README.md for the long description."""
    readme = _HERE / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


def _read_requirements() -> list[str]:
    """Read requirements.txt if it exists."""
    req_file = _HERE / "requirements.txt"
    if req_file.exists():
        lines = req_file.read_text(encoding="utf-8").splitlines()
        return [
            ln.strip()
            for ln in lines
            if ln.strip() and not ln.strip().startswith("#")
        ]
    return []


setup(
    name="sassbuf",
    version=_read_version(),
    description="A Sass compiler with named output buffers (@buffer / @flush).",
    long_description=_read_long_description(),
    long_description_content_type="text/markdown",
    license="MIT",
    author="sassbuf contributors",
    python_requires=">=3.10",
    packages=find_packages(
        include=[
            "sassbuf",
            "sassbuf.*",
        ],
        exclude=[
            "tests",
            "tests.*",
        ],
    ),
    install_requires=_read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.4",
            "mypy>=1.10",
            "black>=24.0",
            "isort>=5.13",
        ],
    },

    # ── CLI ────────────────────────────────────────────────────────────
    #  setuptools creates a platform-appropriate wrapper that calls
    #  sassbuf.__main__:main.
    entry_points={
        "console_scripts": [
            "sassbuf=sassbuf.__main__:main",
        ],
    },

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Compilers",
        "Topic :: Text Processing :: Markup",
    ],
    keywords=[
        "sass",
        "scss",
        "css",
        "preprocessor",
        "compiler",
    ],
    zip_safe=False,
)
