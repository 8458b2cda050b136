"""Shared validation utilities"""

import re
import uuid

# Identity providers issue opaque ids; keep them printable and bounded
USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-.:@|]{1,255}$")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError):
        return False


def validate_user_id(value: str) -> bool:
    """Validate an externally issued user id"""
    return bool(value) and USER_ID_PATTERN.match(value) is not None
