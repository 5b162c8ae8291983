"""Utilities package for SQLTrace."""

from .dev_logger import DevLogger, get_dev_logger, init_dev_logger

__all__ = ['DevLogger', 'get_dev_logger', 'init_dev_logger']
