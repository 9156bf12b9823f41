"""JSON HTTP service that builds Solana instructions and signs and verifies ed25519 messages."""

__version__ = "0.1.0"
__all__ = ["__version__"]