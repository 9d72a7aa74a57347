"""fitcoach progression engine: tiers, XP, ranks, streaks and badges"""

__version__ = "0.1.0"
