# Services package init
"""
Exam Builder Backend — Services Layer
=======================================

Business logic between routes (HTTP) and repositories (persistence).

Service Inventory:
    - UserService: validation, email uniqueness, partial-update merging and
      orchestration of UserRepository calls

Services receive their repository at construction, so unit tests run them
against an in-memory repository with no database and no HTTP.
"""
