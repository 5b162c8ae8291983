"""Concrete database engines."""

from .mysql import MySQLEngine
from .postgresql import PostgreSQLEngine
from .sqlite import SQLiteEngine

__all__ = ['MySQLEngine', 'PostgreSQLEngine', 'SQLiteEngine']
