from .messaging_relay import MessagingRelay, TypingIndicatorRelay, message_id_of

__all__ = ["MessagingRelay", "TypingIndicatorRelay", "message_id_of"]
