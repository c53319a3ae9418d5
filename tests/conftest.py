"""Root conftest - shared test configuration."""

import os

# Settings are cached per process: pin test values before anything imports qipad
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin-test-password")
os.environ.setdefault("API_BASE_URL", "http://test")
os.environ.setdefault("OBJECT_STORAGE_BASE_URL", "https://storage.test/qipad-objects")
os.environ.setdefault("LOG_FORMAT", "text")
