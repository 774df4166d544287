"""
Inspections Domain

Undercarriage inspection reports created from visits: per-component wear
measurements classified OK / VERIFY / CRITICAL, photos, and one-way
submission.
"""

from .router import router

__all__ = ["router"]
