"""
Firestore query helpers using the keyword filter API.
"""

from google.cloud.firestore_v1.base_query import FieldFilter


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply a single field filter to a Firestore query or collection.

    Usage:
        query = where_filter(collection, "status", "in", ["pending", "verified"])
        query = where_filter(query, "escalated", "==", False)
    """
    return query.where(filter=FieldFilter(field_path, op_string, value))
