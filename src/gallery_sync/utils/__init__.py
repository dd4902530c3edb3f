"""Utility helpers for the gallery synchronization application."""

from .logging_config import configure_third_party_loggers, set_log_level, setup_logging

__all__ = ["configure_third_party_loggers", "set_log_level", "setup_logging"]
