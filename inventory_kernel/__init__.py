"""
Inventory Kernel

Shared foundation for the stock reconciliation and replenishment engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock
- Catalog, movement and count-session value objects
- Collaborator ports and their in-memory / SQLAlchemy adapters
"""

__version__ = "0.1.0"
