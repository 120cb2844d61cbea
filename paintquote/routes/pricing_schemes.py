# paintquote/routes/pricing_schemes.py
from flask import Blueprint, request, jsonify, abort, current_app
from flask_login import login_required, current_user
import logging

from paintquote.middleware.auth import active_user_required, admin_required
from paintquote.models import db, PricingScheme
from paintquote.seeds import create_default_pricing_schemes
from paintquote.services.pricing_rules import (
    PricingConfigurationError,
    summarize_rules,
    validate_pricing_rules,
)
from paintquote.services.quote_service import calculation_response, run_calculation

pricing_schemes_bp = Blueprint('pricing_schemes', __name__)
logger = logging.getLogger(__name__)


def get_scheme_or_404(scheme_id):
    scheme = PricingScheme.query.filter_by(id=scheme_id, tenant_id=current_user.tenant_id).first()
    if scheme is None:
        abort(404)
    return scheme


@pricing_schemes_bp.route('', methods=['GET'])
@login_required
@active_user_required
def get_pricing_schemes():
    """List the tenant's active pricing schemes, default first"""
    try:
        schemes = PricingScheme.query.filter_by(
            tenant_id=current_user.tenant_id,
            is_active=True
        ).order_by(PricingScheme.is_default.desc(), PricingScheme.name).all()

        return jsonify([scheme.to_dict() for scheme in schemes])
    except Exception as e:
        logger.error(f"Error retrieving pricing schemes: {str(e)}")
        return jsonify({'error': 'Failed to retrieve pricing schemes'}), 500


@pricing_schemes_bp.route('/<int:scheme_id>', methods=['GET'])
@login_required
@active_user_required
def get_pricing_scheme(scheme_id):
    scheme = get_scheme_or_404(scheme_id)
    return jsonify(scheme.to_dict())


@pricing_schemes_bp.route('/<int:scheme_id>/rules', methods=['GET'])
@login_required
@active_user_required
def get_pricing_scheme_rules(scheme_id):
    """Rules document with a readable summary and any configuration problems"""
    scheme = get_scheme_or_404(scheme_id)
    rules = scheme.pricing_rules or {}

    try:
        summary = summarize_rules(scheme.type, rules)
    except PricingConfigurationError as e:
        logger.warning(f"Pricing scheme {scheme_id} cannot be summarized: {e}")
        summary = None

    return jsonify({
        'id': scheme.id,
        'type': scheme.type,
        'pricingRules': rules,
        'summary': summary,
        'issues': validate_pricing_rules(rules),
    })


@pricing_schemes_bp.route('/<int:scheme_id>/calculate', methods=['POST'])
@login_required
@active_user_required
def calculate_with_scheme(scheme_id):
    """Price the posted builder state with this scheme without saving anything"""
    scheme = get_scheme_or_404(scheme_id)
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No data provided'}), 400

    try:
        tier = data.get('tier', current_app.config.get('DEFAULT_TIER'))
        calculation = run_calculation(data, scheme, tier=tier)
        body, status = calculation_response(calculation, scheme)
        return jsonify(body), status
    except PricingConfigurationError as e:
        logger.warning(f"Pricing scheme {scheme_id} rejected calculation: {e}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error calculating with pricing scheme {scheme_id}: {str(e)}")
        return jsonify({'error': 'Failed to calculate quote'}), 500


@pricing_schemes_bp.route('/seed-defaults', methods=['POST'])
@login_required
@admin_required
def seed_default_schemes():
    """Create the starter schemes for the current tenant when it has none"""
    try:
        created = create_default_pricing_schemes(current_user.tenant_id)
        return jsonify({
            'success': True,
            'created': len(created),
            'schemes': [scheme.to_dict() for scheme in created],
        }), 201 if created else 200
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error seeding pricing schemes for tenant {current_user.tenant_id}: {str(e)}")
        return jsonify({'error': 'Failed to create default pricing schemes'}), 500
