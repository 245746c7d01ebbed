"""PostgreSQL schema: JSON columns are JSONB."""

from sqlalchemy.dialects.postgresql import JSONB

from .tables import build_metadata

metadata = build_metadata(lambda: JSONB(none_as_null=True))
