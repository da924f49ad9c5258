# Backend/app/utils/validation.py
"""
Input validation utilities

Every validator returns (ok, error) so routes can reject before touching the store.
"""
import re

UUID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

def validate_required(body, fields):
    """Check that body is a JSON object holding a non-empty value for each field"""
    if not isinstance(body, dict):
        return False, 'Request body must be a JSON object'

    missing = [f for f in fields if body.get(f) in (None, '')]
    if missing:
        return False, f"Missing required fields: {', '.join(missing)}"

    return True, None

def validate_uuid(value):
    if not isinstance(value, str) or not UUID_RE.match(value.strip()):
        return False, 'Invalid UUID format'
    return True, None

def normalize_uuid(value):
    """Canonical lowercase form so the same id always maps to one queue row"""
    return value.strip().lower()
