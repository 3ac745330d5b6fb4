from priceloop.labs.nocode_connector.interface.studio_connect import (
    AuthorizationProvider,
    StudioConnect,
)

__all__ = ["AuthorizationProvider", "StudioConnect"]
