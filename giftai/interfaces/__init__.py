# interfaces/__init__.py
"""
Interfaces Package

External collaborators behind small clients:
- storage: SQLModel repository
- product_search: Product search API client
- rate_limiter: Pacing of sequential upstream calls
"""
