"""Linear webhook ingestion resource.

Usage
-----
Import the resource for route registration::

    from herald.api.webhook.resources import LinearWebhookResource
"""
