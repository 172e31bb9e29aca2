"""
Domain layer containing the realtime hub state and its coordinators.

Submodules:
- realtime: Presence, messaging relay, call signaling and live broadcast signaling.
- utils: Domain-specific utilities (ID generation, clock).
"""
