"""Deterministic identifiers for feeds and items."""

import hashlib

URN_UUID_PREFIX = "urn:uuid:"


def make_uuid(key: str, prefix: str = "") -> str:
    """Derive a UUID-shaped identifier from a key.

    The md5 digest of the key is laid out as 8-4-4-4-12 hex groups, so the
    same key always yields the same identifier.

    Args:
        key: Source string, typically a link or an application id
        prefix: Prepended verbatim, e.g. "urn:uuid:"

    Returns:
        Prefixed identifier string
    """
    digest = hashlib.md5(str(key).encode("utf-8")).hexdigest()
    groups = (digest[0:8], digest[8:12], digest[12:16], digest[16:20], digest[20:32])
    return prefix + "-".join(groups)
