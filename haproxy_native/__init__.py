"""HAProxy runtime API client and configuration line object mapping."""

__version__ = "0.1.0"