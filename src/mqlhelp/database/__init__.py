# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Storage backends for the error knowledge store."""

from mqlhelp.database.sqlite import SQLiteErrorStore

__all__ = ["SQLiteErrorStore"]
