"""connstat: TCP socket state by remote ASN."""

__version__ = "0.1.0"
