"""Collision-free destination names shared by all file sources."""

from collections.abc import Callable
from datetime import date


def unique_name(file_name: str, exists: Callable[[str], bool], today: date) -> str:
    """Return a date-prefixed name that does not exist yet.

    Tries "yyyy-mm-dd_name", then "yyyy-mm-dd_1_name", "yyyy-mm-dd_2_name", ...
    """
    prefix = today.isoformat()
    candidate = f"{prefix}_{file_name}"
    counter = 1
    while exists(candidate):
        candidate = f"{prefix}_{counter}_{file_name}"
        counter += 1
    return candidate
