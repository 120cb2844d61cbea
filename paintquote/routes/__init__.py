"""
Flask blueprints for the PaintQuote API.

Each module exposes one blueprint; create_app() registers them under /api.
"""
