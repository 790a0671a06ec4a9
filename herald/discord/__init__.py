"""Outbound delivery of notification messages to a Discord webhook.

Public API
----------
DeliveryClient
    Sends compacted messages with pacing, retries and backoff.
DeliveryConfig
    Environment-driven delivery settings.
MessageCompactor
    Fits messages inside Discord's size limits.
DeliveryError, RetryableDeliveryError, FatalDeliveryError, DeliveryExhaustedError
    Delivery failure taxonomy.
"""

from __future__ import annotations

from herald.discord.backoff import compute_backoff_delay
from herald.discord.client import DeliveryClient, DeliveryReceipt
from herald.discord.compactor import MessageCompactor, embed_size, truncate_text
from herald.discord.config import DeliveryConfig
from herald.discord.errors import (
    DeliveryError,
    DeliveryExhaustedError,
    FatalDeliveryError,
    RetryableDeliveryError,
)
from herald.discord.limits import DISCORD_LIMITS, DiscordLimits
from herald.discord.observability import ErrorCategory, categorize_delivery_error
from herald.discord.ratelimit import RateLimitSnapshot

__all__ = [
    "DISCORD_LIMITS",
    "DeliveryClient",
    "DeliveryConfig",
    "DeliveryError",
    "DeliveryExhaustedError",
    "DeliveryReceipt",
    "DiscordLimits",
    "ErrorCategory",
    "FatalDeliveryError",
    "MessageCompactor",
    "RateLimitSnapshot",
    "RetryableDeliveryError",
    "categorize_delivery_error",
    "compute_backoff_delay",
    "embed_size",
    "truncate_text",
]
