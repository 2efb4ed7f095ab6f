"""
Expense Tracker - Source Package

A single-user personal expense record-keeper backed by a local flat file.

DESIGN PRINCIPLES:
1. The store owns every record; callers only ever see read-only views
2. Fail early, fail visibly (validation errors go back to the caller)
3. One bad line never costs the user the rest of their data
4. Every mutation is written through to disk and audited
5. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
