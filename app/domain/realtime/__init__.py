"""
Realtime coordination domain.

Submodules:
- auth: Bearer token verification at connect time.
- presence: Who is connected right now (one session per user).
- messaging: Direct message, receipt and typing relays.
- call: One-to-one call registry, state machine and signaling.
- live: Live broadcast registry and star-topology signaling.
- hub: Command types, the hub that routes them and the single-consumer dispatcher.
"""
