"""WebSocket protocol and transport."""
