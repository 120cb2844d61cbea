# paintquote/services/measurements.py
"""
Measurement resolution for quote surfaces.

Turns what an estimator typed for a surface (room dimensions, linear feet,
a unit count, or an area they already know) into one quantity in the
surface's native unit: square feet, linear feet or a count.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

# Calculation modes
PERIMETER = 'perimeter'
AREA = 'area'
LINEAR = 'linear'
UNIT = 'unit'
CALCULATION_MODES = (PERIMETER, AREA, LINEAR, UNIT)

# Measurement units
SQFT = 'sqft'
LINEAR_FOOT = 'linear_foot'
UNIT_COUNT = 'unit'
HOUR = 'hour'
MEASUREMENT_UNITS = (SQFT, LINEAR_FOOT, UNIT_COUNT, HOUR)

MEASURED_FIELDS = ('length', 'width', 'height', 'linear_feet', 'count')

# Checked in order; first keyword found in the surface name wins.
SURFACE_MODE_KEYWORDS = (
    ('garage', UNIT),
    ('fence', LINEAR),
    ('siding', PERIMETER),
    ('wall', PERIMETER),
    ('ceiling', AREA),
    ('deck', AREA),
    ('floor', AREA),
    ('baseboard', LINEAR),
    ('crown', LINEAR),
    ('trim', LINEAR),
    ('fascia', LINEAR),
    ('soffit', LINEAR),
    ('gutter', LINEAR),
    ('railing', LINEAR),
    ('cabinet', LINEAR),
    ('door', UNIT),
    ('window', UNIT),
    ('shutter', UNIT),
)

FENCE_KEYWORDS = ('fence',)

DEFAULT_UNITS = {
    PERIMETER: SQFT,
    AREA: SQFT,
    LINEAR: LINEAR_FOOT,
    UNIT: UNIT_COUNT,
}


def to_float(value, default=0.0):
    """Coerce form input to a float; blanks, junk, NaN and booleans become `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


FALSE_STRINGS = ('false', '0', 'no', 'off')


def to_bool(value, default=False):
    """Coerce a form flag; 'false', 'no', 'off', '0' and 0 are False, blanks become `default`."""
    if value is None or value == '':
        return default
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def calculation_mode_for(surface_name):
    """Map a surface category name to the way its quantity is measured."""
    name = (surface_name or '').lower()
    for keyword, mode in SURFACE_MODE_KEYWORDS:
        if keyword in name:
            return mode
    return AREA


def default_unit_for(mode):
    return DEFAULT_UNITS.get(mode, SQFT)


def is_fence_like(surface_name):
    name = (surface_name or '').lower()
    return any(keyword in name for keyword in FENCE_KEYWORDS)


@dataclass
class Dimensions:
    """
    Either a direct area/quantity or a set of named measurements, never both.

    Absent measurements are stored as 0.0 so the resolver can treat
    "missing" and "zero" the same way.
    """
    direct_area: Optional[float] = None
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    linear_feet: float = 0.0
    count: float = 0.0

    @classmethod
    def direct(cls, value):
        return cls(direct_area=to_float(value))

    @classmethod
    def measured(cls, length=0, width=0, height=0, linear_feet=0, count=0):
        return cls(
            length=to_float(length),
            width=to_float(width),
            height=to_float(height),
            linear_feet=to_float(linear_feet),
            count=to_float(count),
        )

    @classmethod
    def from_dict(cls, data):
        """Build from the builder's camelCase payload; returns None for an empty payload."""
        if not data or not isinstance(data, dict):
            return None

        input_mode = str(data.get('inputMode') or '').lower()
        direct_value = data.get('directArea')
        if input_mode == 'direct' or (input_mode != 'measured' and to_float(direct_value) > 0):
            return cls.direct(direct_value)

        return cls.measured(
            length=data.get('length'),
            width=data.get('width'),
            height=data.get('height'),
            linear_feet=data.get('linearFeet', data.get('linear_feet')),
            count=data.get('count'),
        )

    @property
    def is_direct(self):
        return self.direct_area is not None

    def with_direct_area(self, value):
        """Switch to direct entry; the named measurements are discarded."""
        return Dimensions.direct(value)

    def with_measurements(self, **measurements):
        """Switch to named measurements; any direct area is discarded."""
        unknown = set(measurements) - set(MEASURED_FIELDS)
        if unknown:
            raise ValueError(f"Unknown measurement(s): {', '.join(sorted(unknown))}")
        return Dimensions.measured(**measurements)

    def to_dict(self):
        if self.is_direct:
            return {'inputMode': 'direct', 'directArea': self.direct_area}
        return {
            'inputMode': 'measured',
            'length': self.length,
            'width': self.width,
            'height': self.height,
            'linearFeet': self.linear_feet,
            'count': self.count,
        }


def resolve_quantity(mode, dimensions, surface_name=''):
    """
    Resolve a Dimensions record to a quantity in the surface's native unit.

    perimeter: 2 x (L + W) x H for a room, L x H for a single wall
    area:      L x W
    linear:    linear feet (x height for fences), else 2 x (L + W)
    unit:      count x H x W when both are given, else the plain count

    A direct area wins regardless of mode. The result is never negative.
    """
    if dimensions is None:
        return 0.0

    if dimensions.is_direct:
        quantity = dimensions.direct_area or 0.0
    else:
        length = dimensions.length
        width = dimensions.width
        height = dimensions.height

        if mode == PERIMETER:
            if length and width and height:
                quantity = 2 * (length + width) * height
            elif length and height:
                quantity = length * height
            else:
                quantity = 0.0

        elif mode == AREA:
            quantity = length * width if (length and width) else 0.0

        elif mode == LINEAR:
            if dimensions.linear_feet:
                quantity = dimensions.linear_feet
                if height and is_fence_like(surface_name):
                    quantity = dimensions.linear_feet * height
            elif length or width:
                quantity = 2 * (length + width)
            else:
                quantity = 0.0

        elif mode == UNIT:
            count = dimensions.count
            if count and height and width:
                quantity = count * height * width
            else:
                quantity = count

        else:
            logger.warning(f"Unknown calculation mode '{mode}' for surface '{surface_name}'")
            quantity = 0.0

    if quantity < 0:
        logger.debug(f"Negative quantity {quantity} for surface '{surface_name}' resolved to 0")
        return 0.0
    return quantity


def validate_dimensions(mode, dimensions, surface_name='') -> List[str]:
    """
    Return the names of required measurements that are missing or not positive.

    A direct area only needs to be positive. Optional measurements (the width
    of a single wall, door sizes) are never reported.
    """
    if dimensions is None:
        return []

    if dimensions.is_direct:
        return [] if (dimensions.direct_area or 0) > 0 else ['directArea']

    missing = []
    if mode == PERIMETER:
        required = ('length', 'height')
    elif mode == AREA:
        required = ('length', 'width')
    elif mode == UNIT:
        required = ('count',)
    elif mode == LINEAR:
        required = ()
        if dimensions.linear_feet <= 0 and dimensions.length <= 0 and dimensions.width <= 0:
            missing.append('linearFeet')
        if is_fence_like(surface_name) and dimensions.height <= 0:
            missing.append('height')
    else:
        required = ()

    for field_name in required:
        if getattr(dimensions, field_name) <= 0:
            missing.append(field_name)
    return missing


@dataclass
class SurfaceItem:
    """One selected surface inside an area, with its resolved quantity."""
    category: str
    quantity: float = 0.0
    unit: str = SQFT
    selected: bool = True
    dimensions: Optional[Dimensions] = None
    coats: Optional[float] = None
    gallons: Optional[float] = None
    allow_manual_gallons: bool = False
    mode: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_dict(cls, data, scope=None):
        category = data.get('categoryName') or data.get('category') or data.get('name') or ''
        mode = data.get('calculationMode') or calculation_mode_for(category)
        dimensions = Dimensions.from_dict(data.get('dimensions'))

        if dimensions is not None:
            quantity = resolve_quantity(mode, dimensions, category)
        else:
            quantity = max(to_float(data.get('quantity')), 0.0)

        coats = data.get('numberOfCoats', data.get('coats'))
        gallons = data.get('gallons')
        return cls(
            category=category,
            quantity=quantity,
            unit=data.get('measurementUnit') or data.get('unit') or default_unit_for(mode),
            selected=to_bool(data.get('selected'), True),
            dimensions=dimensions,
            coats=to_float(coats) if coats not in (None, '') else None,
            gallons=to_float(gallons) if gallons not in (None, '') else None,
            allow_manual_gallons=to_bool(data.get('allowManualGallons')),
            mode=mode,
            scope=data.get('jobType') or scope,
        )

    @property
    def calculation_mode(self):
        return self.mode or calculation_mode_for(self.category)

    def missing_measurements(self):
        return validate_dimensions(self.calculation_mode, self.dimensions, self.category)


@dataclass
class Area:
    """A named part of the job (room, elevation) holding surface line items."""
    name: str
    surfaces: List[SurfaceItem]
    job_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data, position=0, job_type=None):
        """`job_type` is the quote-level scope, used when the area carries none."""
        items = data.get('laborItems') or data.get('surfaces') or []
        job_type = data.get('jobType') or job_type
        return cls(
            name=data.get('name') or f'Area {position + 1}',
            surfaces=[SurfaceItem.from_dict(item, job_type) for item in items if isinstance(item, dict)],
            job_type=job_type,
        )

    @property
    def selected_surfaces(self):
        return [surface for surface in self.surfaces if surface.selected]
