"""Scheduled jobs."""

from .reconciliation import build_scheduler, run_reconciliation_once

__all__ = ["build_scheduler", "run_reconciliation_once"]
