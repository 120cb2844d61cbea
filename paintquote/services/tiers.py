# paintquote/services/tiers.py
"""
Good/Better/Best tier resolution.

A scheme may carry sparse per-tier overrides for any rate or price. The
selector swaps in the override for the active tier when one exists and
otherwise leaves the base value alone.
"""
import logging
import re
from enum import Enum

from .measurements import to_float
from .pricing_rules import PricingConfigurationError

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    GOOD = 'good'
    BETTER = 'better'
    BEST = 'best'


TIERS = (Tier.GOOD, Tier.BETTER, Tier.BEST)

NO_TIER_VALUES = ('', 'single', 'none')


def parse_tier(value):
    """Tier for `value`, or None for single-tier quotes."""
    if value is None or isinstance(value, Tier):
        return value
    key = str(value).strip().lower()
    if key in NO_TIER_VALUES:
        return None
    try:
        return Tier(key)
    except ValueError:
        raise PricingConfigurationError(f"Unknown tier: '{value}'")


def normalize_key(key):
    """'Exterior Walls', 'exterior_walls' and 'exteriorWalls' all become 'exteriorwalls'."""
    return re.sub(r'[^a-z0-9]', '', str(key).lower())


def lookup(table, keys):
    """
    First numeric value in `table` under any of `keys`.

    Each key is tried exactly, then against the normalised form of every
    table key, before moving on to the next one.
    """
    if not table:
        return None

    normalized = {}
    for table_key, value in table.items():
        normalized.setdefault(normalize_key(table_key), value)

    for key in keys:
        if key in table:
            value = table[key]
        else:
            value = normalized.get(normalize_key(key))
        if value is None or value == '':
            continue
        number = to_float(value, None)
        if number is not None:
            return number
    return None


class TierSelector:
    def __init__(self, enabled=False, tier=None):
        self.enabled = bool(enabled)
        self.tier = parse_tier(tier)

    @property
    def active(self):
        return self.enabled and self.tier is not None

    def resolve(self, base, overrides, *keys):
        """The active tier's override for the first matching key, else `base`."""
        if not self.active or not overrides:
            return base

        tier_table = overrides.get(self.tier.value)
        if not isinstance(tier_table, dict):
            return base

        override = lookup(tier_table, keys)
        if override is None:
            return base

        logger.debug(f"{self.tier.value} tier override for {keys[0] if keys else '?'}: {base} -> {override}")
        return override

    def __repr__(self):
        tier = self.tier.value if self.tier else None
        return f'<TierSelector enabled={self.enabled} tier={tier}>'
