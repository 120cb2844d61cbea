"""PaintQuote: quote pricing API for painting contractors."""

__version__ = '1.0.0'
