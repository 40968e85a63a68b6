"""
StockTA - Technical Indicator & Signal-Detection Engine

Derives indicator series and discrete trading signals from OHLCV bars.
"""

__version__ = "0.1.0"
