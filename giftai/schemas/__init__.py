# schemas/__init__.py
"""
Schemas Package

Contains:
- gift_schemas: Pydantic v2 API requests/responses
- tables: SQLModel persistence tables
"""
