"""IFWI version extraction, FUPH/DnX header parsing, payload chunking and session events for the Intel DnX recovery protocol."""

__version__ = "0.1.0"
__all__ = ["__version__"]