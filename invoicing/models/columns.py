"""
Shared column types.
JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
"""
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

JSONType = JSON().with_variant(JSONB(), "postgresql")
