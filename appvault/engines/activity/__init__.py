from appvault.engines.activity.tracker import ActivityTracker

__all__ = ["ActivityTracker"]
