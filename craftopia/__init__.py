"""Craftopia catalog API - Backend.

A REST backend for a handmade decor shop:
- User accounts with role-based access (user / admin / super_admin).
- Product categories.
- Decor listings with images, stock and search.

Core concepts:
- MongoDB is the only store; every request is independent.
- Denormalized counters (category decorCount) are adjusted explicitly after writes.

See DESIGN.md for how the pieces fit together.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
