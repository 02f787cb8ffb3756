"""Root conftest: shared test configuration."""

import os

# Ensure tests never touch a developer's on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
