#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sassbuf/__main__.py
===================

Entry point for ``python -m sassbuf``; see :mod:`sassbuf.main`.
"""

from __future__ import annotations

from sassbuf.main import main

if __name__ == "__main__":
    raise SystemExit(main())
