"""Herald HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives Linear webhooks and exposes health and
operational endpoints.

Usage
-----
Create and run the application::

    from herald.api import create_app

    app = create_app()                                # health-only mode
    app = create_app(dependencies, config=api_config) # full relay mode

Public API
----------
create_app
    Application factory that configures the Falcon ASGI app with health
    endpoints and, when relay dependencies are provided, the webhook and
    optional operational endpoints.
"""

from herald.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
