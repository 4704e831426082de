"""
QuantDash App - Quantitative Analytics Core

Deterministic numerical transforms for a market dashboard: rolling-window
statistics, the NVT-style ratio signal with adaptive volatility bands,
yield curve interpolation and Monte Carlo risk estimation.
"""

__version__ = "0.1.0"
__author__ = "QuantDash Team"
