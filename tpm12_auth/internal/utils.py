# SPDX-License-Identifier: BSD-2


def _CLASS_INT_ATTRS_from_string(cls, str_value, fixup_map=None):
    """
    Given a class, lookup int attributes by name and return that attribute value.
    :param cls: The class to search.
    :param str_value: The key for the attribute in the class.
    """

    friendly = {
        key.upper(): value
        for (key, value) in vars(cls).items()
        if isinstance(value, int) and not key.startswith("_")
    }

    if fixup_map is not None and str_value.upper() in fixup_map:
        str_value = fixup_map[str_value.upper()]

    return friendly[str_value.upper()]


def _to_bytes_or_none(value, name="value"):
    """Normalize a bytes-like value.

    None:       None
    bytes:      bytes
    bytearray:  bytes
    memoryview: bytes
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise TypeError(
        f"Expected {name} to be bytes-like or None, got: {type(value).__name__}"
    )
