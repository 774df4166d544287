"""
Visits Domain

Field visits tracked through check-in and check-out, the vendor's daily agenda
built from the active route, and monthly visit summaries.
"""

from .router import router

__all__ = ["router"]
