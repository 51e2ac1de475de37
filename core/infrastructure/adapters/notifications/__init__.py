"""Notification adapters for discrepancy alerts, payment reminders and batch summaries.

The Slack adapter pulls in aiohttp; import concrete services from their modules.
"""

__all__ = []
