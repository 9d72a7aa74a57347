"""Monitoring infrastructure for fitcoach"""
from fitcoach.monitoring.metrics import metrics

__all__ = ["metrics"]
