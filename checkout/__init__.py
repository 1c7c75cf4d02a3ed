"""
Scan Checkout

Cart scanning and promotion pricing with optimistic concurrency and
idempotent item scans.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
