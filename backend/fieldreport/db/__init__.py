"""Database Infrastructure: engine factory and SQLAlchemy Base.

Invariants:
    - Single engine per process (initialized via init_db)
    - Sessions are synchronous; every store call completes or fails immediately

Design Decisions:
    - SQLite by default, any SQLAlchemy URL accepted (PostgreSQL in deployment)
"""
