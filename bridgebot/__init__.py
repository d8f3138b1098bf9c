"""Cross-chain bridge quote aggregation for chat."""

__version__ = "0.1.0"
