"""EIP-712 wallet authentication: stateless challenges and wallet sessions."""

__version__ = "0.3.0"
