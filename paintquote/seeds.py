# paintquote/seeds.py
import logging

from paintquote.models import db, PricingScheme

logger = logging.getLogger(__name__)

DEFAULT_PRICING_SCHEMES = [
    {
        'name': 'Turnkey Pricing (Whole-Home)',
        'type': 'turnkey',
        'description': 'A single all-in price for the entire home based on total home square footage. '
                       'Labor and materials are always included.',
        'is_default': True,
        'pricing_rules': {
            'includeMaterials': True,
            'coverage': 350,
            'applicationMethod': 'roll',
            'coats': 2,
            'costPerGallon': 40,
            'turnkeyRate': 3.50,
            'interiorRate': 3.25,
            'exteriorRate': 3.75,
            'depositPercent': 50,
        },
    },
    {
        'name': 'Flat Rate Unit Pricing',
        'type': 'flat_rate_unit',
        'description': 'A fixed price per unit multiplied by quantity. '
                       'Labor and materials are baked into the unit price.',
        'pricing_rules': {
            'includeMaterials': True,
            'coverage': 350,
            'applicationMethod': 'roll',
            'coats': 2,
            'costPerGallon': 40,
            'unitPrices': {
                'walls_sqft': 2.50,
                'ceilings_sqft': 2.00,
                'trim_linear_ft': 1.50,
                'exterior_walls_sqft': 3.00,
                'exterior_trim_linear_ft': 1.80,
                'soffit_fascia_linear_ft': 2.00,
                'gutters_linear_ft': 4.00,
                'decks_railings_sqft': 2.50,
                'door_unit': 85.00,
                'window_unit': 75.00,
                'cabinet_unit': 125.00,
            },
            'depositPercent': 50,
        },
    },
    {
        'name': 'Production-Based Pricing',
        'type': 'production_based',
        'description': 'Labor is calculated from production rates and an hourly labor rate. '
                       'Materials are calculated from paint coverage.',
        'pricing_rules': {
            'includeMaterials': True,
            'coverage': 350,
            'applicationMethod': 'roll',
            'coats': 2,
            'costPerGallon': 40,
            'billableLaborRate': 55.00,
            'crewSize': 2,
            'productionRates': {
                'interior_walls': 300,
                'interior_ceilings': 250,
                'interior_trim': 75,
                'exterior_siding': 250,
                'exterior_trim': 60,
                'soffit_fascia': 50,
                'doors': 4,
                'windows': 5,
            },
            'materialMarkupPercent': 15,
            'overheadPercent': 10,
            'profitMarginPercent': 15,
            'depositPercent': 30,
        },
    },
    {
        'name': 'Rate-Based Square Foot Pricing',
        'type': 'rate_based_sqft',
        'description': 'Labor is calculated from a rate per unit for each surface. '
                       'Materials are calculated from paint coverage.',
        'pricing_rules': {
            'includeMaterials': True,
            'coverage': 350,
            'applicationMethod': 'roll',
            'coats': 2,
            'costPerGallon': 40,
            'laborRates': {
                'interior_walls': 1.25,
                'interior_ceilings': 1.00,
                'interior_trim': 1.50,
                'interior_doors': 85.00,
                'interior_cabinets': 10.00,
                'exterior_walls': 1.75,
                'exterior_trim': 2.00,
                'exterior_doors': 95.00,
                'shutters': 50.00,
                'decks_railings': 2.00,
                'soffit_fascia': 2.50,
            },
            'gbbEnabled': True,
            'gbbRates': {
                'good': {'interior_walls': 1.00, 'exterior_walls': 1.50},
                'best': {'interior_walls': 1.60, 'exterior_walls': 2.25},
            },
            'gbbMaterialSettings': {
                'good': {'costPerGallon': 30},
                'better': {'costPerGallon': 45},
                'best': {'costPerGallon': 65},
            },
            'materialMarkupPercent': 20,
            'overheadPercent': 10,
            'profitMarginPercent': 20,
            'depositPercent': 50,
        },
    },
    {
        'name': 'Time & Materials',
        'type': 'hourly_time_materials',
        'description': 'Hours estimated from production rates and billed at an hourly rate, plus materials.',
        'pricing_rules': {
            'includeMaterials': True,
            'coverage': 350,
            'applicationMethod': 'roll',
            'coats': 2,
            'costPerGallon': 40,
            'billableLaborRate': 60.00,
            'crewSize': 2,
            'materialMarkupPercent': 25,
            'depositPercent': 30,
        },
    },
]


def create_default_pricing_schemes(tenant_id):
    """
    Create the default pricing schemes for a tenant.

    Does nothing when the tenant already has schemes. Returns the created rows.
    """
    existing = PricingScheme.query.filter_by(tenant_id=tenant_id).count()
    if existing > 0:
        logger.info(f"Pricing schemes already exist for tenant {tenant_id}")
        return []

    created = []
    for scheme_data in DEFAULT_PRICING_SCHEMES:
        scheme = PricingScheme(
            tenant_id=tenant_id,
            name=scheme_data['name'],
            type=scheme_data['type'],
            description=scheme_data['description'],
            is_default=scheme_data.get('is_default', False),
            is_active=True,
            pricing_rules=dict(scheme_data['pricing_rules']),
        )
        db.session.add(scheme)
        created.append(scheme)
        logger.info(f"Created pricing scheme: {scheme.name} for tenant {tenant_id}")

    db.session.commit()
    return created
