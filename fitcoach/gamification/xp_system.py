"""
XP Ledger

Every completed activity is worth a flat 100 XP. No decay, no cap and no
negative XP. Two forms that must always agree:

    xp_for_activity_count(n + 1) == add_activity(xp_for_activity_count(n))

add_activity() is the incremental form used on each completion event;
xp_for_activity_count() rebuilds a total from a history count.
"""

from fitcoach.validators import require_non_negative_int

XP_PER_ACTIVITY = 100


def xp_for_activity_count(count: int) -> int:
    """Total XP for a number of completed activities"""
    require_non_negative_int(count, "count")
    return count * XP_PER_ACTIVITY


def add_activity(current_xp: int) -> int:
    """Accrue XP for one more completed activity"""
    require_non_negative_int(current_xp, "current_xp")
    return current_xp + XP_PER_ACTIVITY


def format_xp(xp: int) -> str:
    """Format XP for display with thousands separators (e.g. "1,500 XP")"""
    return f"{xp:,} XP"
