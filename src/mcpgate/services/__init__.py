"""Domain tool sets built on the downstream API client."""

from mcpgate.services.customers import register_customer_tools

__all__ = ["register_customer_tools"]
