"""
Transport layer: the only place where a prepared response meets the
outside world. The rest of the package decides what to send; this
decides nothing and just emits, once.
"""

from .transport import BufferedTransport, HeadersAlreadySent, Transport, TransportState

__all__ = [
    "Transport",            # Emission primitives (ABC)
    "BufferedTransport",    # In-memory transport for WSGI and tests
    "TransportState",       # NEW -> SENT -> CLOSED
    "HeadersAlreadySent",   # Header after commit
]
