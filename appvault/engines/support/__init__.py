from appvault.engines.support.desk import SupportDesk

__all__ = ["SupportDesk"]
