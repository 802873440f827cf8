"""Authentication services."""

from src.services.auth.gateway import DEFAULT_SEED, AuthGateway

__all__ = ["DEFAULT_SEED", "AuthGateway"]
