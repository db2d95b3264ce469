"""Provider adapters.  One adapter per message type."""
