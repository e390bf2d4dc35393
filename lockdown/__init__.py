"""
Content Lockdown Service.

Locks and protects selected content items against edits and deletion
by principals lacking the administrative bypass capability.
"""

__version__ = "1.1.1"
