"""Workflow core plus the ambient pieces the CLI needs.

Provides:
- Settings loaded from .env
- Structured logging
- The workflow definition store and instance engine
- A small CLI surface
"""
