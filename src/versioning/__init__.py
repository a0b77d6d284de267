"""Version computation, version index and resolution data models."""
