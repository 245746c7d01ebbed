"""SQLite schema: JSON columns are stored as serialized text."""

import sqlalchemy as sa

from .tables import build_metadata

metadata = build_metadata(lambda: sa.JSON(none_as_null=True))
