"""
Claims Kernel

Shared foundation for the self-funded claims reporting engines:
- Immutable domain records for actuals, monthly overlays and fee windows
- Decimal-only monetary values
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
