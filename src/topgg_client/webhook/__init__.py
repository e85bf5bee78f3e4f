"""
Webhook module for the top.gg client.

Contains the vote webhook listener.
"""

from .listener import ListenerStats, WebhookBindError, WebhookListener, start_listener

__all__ = [
    "WebhookListener",
    "WebhookBindError",
    "ListenerStats",
    "start_listener",
]
