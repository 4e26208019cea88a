"""Store Sync merchant service for PayPal agentic checkout."""

__version__ = "1.0.0"
