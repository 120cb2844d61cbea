"""
Quote pricing services.

The pricing engine (measurements, labor, materials, tiers, quote_calculator)
has no Flask or database dependency; routes hand it plain dicts.
"""
