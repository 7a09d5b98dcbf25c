from appvault.engines.notifications.notifier import Notifier

__all__ = ["Notifier"]
