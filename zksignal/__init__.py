"""zksignal: proof-gated trading signals.

A deterministic fixed-point predictor commits ``(action, confidence,
predicted_price)`` as a 96-byte journal; the ledger stores it only with a
seal binding that journal to the trusted engine build.
"""

__version__ = "0.1.0"
