"""
FinTrack - Source Package

A project-based personal finance tracker: income and expense
transactions grouped by project, user-defined categories, optional
Google Drive backup and AI-generated insights.

DESIGN PRINCIPLES:
1. Local data is the source of truth until a remote snapshot is pulled
2. Remote sync and AI are optional - the app works fully offline
3. A failed remote call never damages local data
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"
