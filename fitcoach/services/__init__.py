"""
Service Layer Package

Business logic that sits between callers (scripts, handlers) and the
progression storage.

- ProgressionService: activity completions, assessment tiers, progress summaries
"""
