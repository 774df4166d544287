"""
Routes Domain

Weekly route assignment: one active route per vendor, holding ordered client
stops per weekday (Monday to Saturday).
"""

from .router import router

__all__ = ["router"]
