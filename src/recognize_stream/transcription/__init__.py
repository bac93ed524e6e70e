"""Speech recognition over the service's WebSocket interface."""
