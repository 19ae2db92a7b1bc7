# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Command gating and the batch command protocol."""

from restcache.gateway.gateway import CommandGateway, CommandStats
from restcache.gateway.results import BatchError, BatchResult, ItemResult

__all__ = ["BatchError", "BatchResult", "CommandGateway", "CommandStats", "ItemResult"]
