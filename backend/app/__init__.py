"""
Exam Builder Backend — Application Package
============================================

User management API for the exam builder: teachers and administrators
stored in a single `users` table, plus a health check.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← envelopes, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, uniqueness, merging
    ├─────────────────────────────────────┤
    │   Repositories (Persistence gateway)│  ← CRUD primitives on `users`
    ├─────────────────────────────────────┤
    │   Models, Schemas & Database        │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
