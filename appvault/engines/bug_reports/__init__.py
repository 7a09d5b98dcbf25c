"""
Bug Report Engine - reports earn their frozen reward once, on approval.
"""

from appvault.engines.bug_reports.workflow import BugReportWorkflow, reward_reason

__all__ = ["BugReportWorkflow", "reward_reason"]
