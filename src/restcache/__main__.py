# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Entry point for ``python -m restcache``."""

from restcache.cli.app import app

app()
