# sams/preferences.py
"""Staff-preference resolution.

Preferences are ids the customer picked when booking. By the time an owner
assigns the appointment, some of those staff rows may be gone; such ids are
reported as stale and otherwise ignored, never raised.
"""

from typing import Iterable, List, NamedTuple, Optional, Sequence


class PreferenceResolution(NamedTuple):
    preferred: list  # roster order
    other: list
    stale: List[int]  # preference order


def _ids(roster: Iterable) -> List[int]:
    return [member.id for member in roster]


def resolve_preferences(preferences: Optional[Sequence[int]], roster: Sequence) -> PreferenceResolution:
    wanted = set(preferences or ())
    preferred = [member for member in roster if member.id in wanted]
    other = [member for member in roster if member.id not in wanted]

    on_roster = set(_ids(roster))
    stale = [staff_id for staff_id in (preferences or ()) if staff_id not in on_roster]
    return PreferenceResolution(preferred, other, stale)


def suggest_staff_id(
    roster: Sequence,
    preferences: Optional[Sequence[int]] = None,
    current_staff_id: Optional[int] = None,
) -> Optional[int]:
    """Pre-selected staff for an assignment, or None when a manual pick is needed."""
    on_roster = set(_ids(roster))
    if current_staff_id:
        # an explicit assignment that went stale is not replaced by a preference
        return current_staff_id if current_staff_id in on_roster else None
    for staff_id in preferences or ():
        if staff_id in on_roster:
            return staff_id
    return None
