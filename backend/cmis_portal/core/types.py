"""Custom SQLAlchemy types for cross-database compatibility"""
from sqlalchemy import TypeDecorator, String, JSON
from sqlalchemy.dialects.postgresql import ARRAY

from cmis_portal.utils.field_normalizer import normalize_string_list


class StringArray(TypeDecorator):
    """
    List-of-strings column.

    Native VARCHAR[] on PostgreSQL, JSON everywhere else. Values are run through
    the field normalizer in both directions so legacy JSON-string and CSV-string
    rows read back as lists.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(String))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return normalize_string_list(value)

    def process_result_value(self, value, dialect):
        return normalize_string_list(value)
