# paintquote/routes/quotes.py
from flask import Blueprint, request, jsonify, abort, current_app
from flask_login import login_required, current_user
from datetime import datetime
import logging

from paintquote.middleware.auth import active_user_required
from paintquote.models import db, Quote, QUOTE_STATUSES
from paintquote.services.labor import CONDITION_MULTIPLIERS
from paintquote.services.measurements import to_float
from paintquote.services.pricing_rules import PricingConfigurationError
from paintquote.services.proposal import company_from_config, generate_quote_proposal
from paintquote.services.quote_numbers import generate_quote_number
from paintquote.services.quote_service import (
    calculation_response,
    find_scheme,
    run_calculation,
    run_tier_options,
)
from paintquote.services.tiers import parse_tier

quotes_bp = Blueprint('quotes', __name__)
logger = logging.getLogger(__name__)

JOB_TYPES = ('interior', 'exterior', 'both')
TEXT_FIELDS = ('customer_name', 'customer_email', 'customer_phone', 'job_address', 'notes')


def get_quote_or_404(quote_id):
    quote = Quote.query.filter_by(id=quote_id, tenant_id=current_user.tenant_id).first()
    if quote is None:
        abort(404)
    return quote


def default_tier(tier):
    return tier if tier is not None else current_app.config.get('DEFAULT_TIER')


def apply_quote_fields(quote, data):
    """Copy builder fields from a request body onto a quote; returns a list of errors."""
    errors = []

    for field in TEXT_FIELDS:
        if field in data:
            value = data[field]
            setattr(quote, field, str(value).strip() if value is not None else None)

    if 'job_type' in data:
        job_type = str(data['job_type'] or '').lower()
        if job_type not in JOB_TYPES:
            errors.append(f"Invalid job_type '{data['job_type']}'. Must be one of: {', '.join(JOB_TYPES)}")
        else:
            quote.job_type = job_type

    if 'pricing_scheme_id' in data:
        scheme_id = data['pricing_scheme_id']
        if scheme_id is None:
            quote.pricing_scheme_id = None
        elif find_scheme(scheme_id) is None:
            errors.append(f'Pricing scheme {scheme_id} not found')
        else:
            quote.pricing_scheme_id = scheme_id

    if 'selected_tier' in data:
        try:
            tier = parse_tier(data['selected_tier'])
            quote.selected_tier = tier.value if tier else None
        except PricingConfigurationError as e:
            errors.append(str(e))

    if 'home_sqft' in data:
        home_sqft = data['home_sqft']
        if home_sqft in (None, ''):
            quote.home_sqft = None
        elif to_float(home_sqft, -1) < 0:
            errors.append(f'Invalid home_sqft {home_sqft}')
        else:
            quote.home_sqft = to_float(home_sqft)

    if 'condition_modifier' in data:
        condition = str(data['condition_modifier'] or 'average').strip().lower()
        if condition not in CONDITION_MULTIPLIERS:
            errors.append(
                f"Invalid condition_modifier '{data['condition_modifier']}'. "
                f"Must be one of: {', '.join(CONDITION_MULTIPLIERS)}"
            )
        else:
            quote.condition_modifier = condition

    if 'areas' in data:
        if not isinstance(data['areas'], list):
            errors.append('areas must be a list')
        else:
            quote.areas = data['areas']

    if 'product_sets' in data:
        if not isinstance(data['product_sets'], (dict, list)):
            errors.append('product_sets must be an object or a list')
        else:
            quote.product_sets = data['product_sets']

    return errors


@quotes_bp.route('/calculate', methods=['POST'])
@login_required
@active_user_required
def calculate_quote():
    """Price builder state without saving it"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No data provided'}), 400

    scheme = find_scheme(data.get('pricingSchemeId'))
    if scheme is None:
        return jsonify({'error': 'Pricing scheme not found'}), 404

    try:
        calculation = run_calculation(data, scheme, tier=default_tier(data.get('tier')))
        body, status = calculation_response(calculation, scheme)
        return jsonify(body), status
    except PricingConfigurationError as e:
        logger.warning(f"Calculation rejected for scheme {scheme.id}: {e}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error calculating quote: {str(e)}")
        return jsonify({'error': 'Failed to calculate quote'}), 500


@quotes_bp.route('/calculate-tiers', methods=['POST'])
@login_required
@active_user_required
def calculate_quote_tiers():
    """Good, better and best totals side by side"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No data provided'}), 400

    scheme = find_scheme(data.get('pricingSchemeId'))
    if scheme is None:
        return jsonify({'error': 'Pricing scheme not found'}), 404

    try:
        options = run_tier_options(data, scheme)
        refused = next((calc for calc in options.values() if not calc.ok), None)
        if refused is not None:
            body, status = calculation_response(refused, scheme)
            return jsonify(body), status

        return jsonify({
            'success': True,
            'pricingScheme': {'id': scheme.id, 'name': scheme.name, 'type': scheme.type},
            'options': {tier: calc.to_dict() for tier, calc in options.items()},
        })
    except PricingConfigurationError as e:
        logger.warning(f"Tier calculation rejected for scheme {scheme.id}: {e}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error calculating quote tiers: {str(e)}")
        return jsonify({'error': 'Failed to calculate quote tiers'}), 500


@quotes_bp.route('', methods=['GET'])
@login_required
@active_user_required
def get_quotes():
    """List the tenant's quotes, newest first, optionally filtered by status"""
    status = request.args.get('status')
    if status and status not in QUOTE_STATUSES:
        return jsonify({'error': f"Invalid status '{status}'"}), 400

    try:
        query = Quote.query.filter_by(tenant_id=current_user.tenant_id)
        if status:
            query = query.filter_by(status=status)
        quotes = query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
        return jsonify([quote.to_dict() for quote in quotes])
    except Exception as e:
        logger.error(f"Error retrieving quotes: {str(e)}")
        return jsonify({'error': 'Failed to retrieve quotes'}), 500


@quotes_bp.route('', methods=['POST'])
@login_required
@active_user_required
def create_quote():
    """Create a draft quote"""
    data = request.get_json(silent=True) or {}

    try:
        quote = Quote(
            tenant_id=current_user.tenant_id,
            status='draft',
            job_type='interior',
            condition_modifier='average',
            areas=[],
            product_sets={},
        )
        errors = apply_quote_fields(quote, data)
        if errors:
            return jsonify({
                'success': False,
                'errors': errors,
                'message': 'Validation errors occurred. The quote was not created.'
            }), 400

        if quote.pricing_scheme_id is None:
            scheme = find_scheme()
            quote.pricing_scheme_id = scheme.id if scheme else None

        quote.quote_number = generate_quote_number()
        db.session.add(quote)
        db.session.commit()

        logger.info(f"Created quote {quote.quote_number} for tenant {current_user.tenant_id}")
        return jsonify(quote.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating quote: {str(e)}")
        return jsonify({'error': 'Failed to create quote'}), 500


@quotes_bp.route('/<int:quote_id>', methods=['GET'])
@login_required
@active_user_required
def get_quote(quote_id):
    quote = get_quote_or_404(quote_id)
    return jsonify(quote.to_dict())


@quotes_bp.route('/<int:quote_id>', methods=['PUT'])
@login_required
@active_user_required
def update_quote(quote_id):
    """Save builder state (customer, areas, product sets, scheme, tier)"""
    quote = get_quote_or_404(quote_id)
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No data provided'}), 400

    try:
        errors = apply_quote_fields(quote, data)
        if errors:
            db.session.rollback()
            return jsonify({
                'success': False,
                'errors': errors,
                'message': 'Validation errors occurred. No changes were saved.'
            }), 400

        db.session.commit()
        return jsonify(quote.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating quote {quote_id}: {str(e)}")
        return jsonify({'error': 'Failed to update quote'}), 500


@quotes_bp.route('/<int:quote_id>/status', methods=['PUT'])
@login_required
@active_user_required
def update_quote_status(quote_id):
    quote = get_quote_or_404(quote_id)
    data = request.get_json(silent=True) or {}
    status = data.get('status')

    if status not in QUOTE_STATUSES:
        return jsonify({'error': f"Invalid status. Must be one of: {', '.join(QUOTE_STATUSES)}"}), 400

    try:
        quote.status = status
        if status == 'sent' and quote.sent_at is None:
            quote.sent_at = datetime.utcnow()
        db.session.commit()

        logger.info(f"Quote {quote_id} status changed to {status}")
        return jsonify(quote.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating status for quote {quote_id}: {str(e)}")
        return jsonify({'error': 'Failed to update quote status'}), 500


@quotes_bp.route('/<int:quote_id>/calculate', methods=['POST'])
@login_required
@active_user_required
def recalculate_quote(quote_id):
    """Recompute a saved quote's totals and store them on the quote"""
    quote = get_quote_or_404(quote_id)
    data = request.get_json(silent=True) or {}

    scheme = quote.pricing_scheme if quote.pricing_scheme_id else find_scheme()
    if scheme is None:
        return jsonify({'error': 'Pricing scheme not found'}), 404

    try:
        tier = default_tier(data.get('tier', quote.selected_tier))
        calculation = run_calculation(quote.calculation_input(), scheme, tier=tier, quote_id=quote.id)
        if not calculation.ok:
            body, status = calculation_response(calculation, scheme)
            return jsonify(body), status

        quote.pricing_scheme_id = scheme.id
        quote.apply_breakdown(calculation.to_dict())
        db.session.commit()

        return jsonify({
            'success': True,
            'quote': quote.to_dict(),
            'breakdown': quote.breakdown,
        })
    except PricingConfigurationError as e:
        db.session.rollback()
        logger.warning(f"Calculation rejected for quote {quote_id}: {e}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error recalculating quote {quote_id}: {str(e)}")
        return jsonify({'error': 'Failed to calculate quote'}), 500


@quotes_bp.route('/<int:quote_id>/proposal', methods=['GET'])
@login_required
@active_user_required
def get_quote_proposal(quote_id):
    """Generate a PDF proposal for a quote"""
    quote = get_quote_or_404(quote_id)
    scheme = quote.pricing_scheme if quote.pricing_scheme_id else find_scheme()
    if scheme is None:
        return jsonify({'error': 'Pricing scheme not found'}), 404

    try:
        calculation = run_calculation(
            quote.calculation_input(), scheme, tier=default_tier(quote.selected_tier), quote_id=quote.id,
        )
        if not calculation.ok:
            body, status = calculation_response(calculation, scheme)
            return jsonify(body), status

        return generate_quote_proposal(quote, calculation, company_from_config(current_app.config))
    except PricingConfigurationError as e:
        logger.warning(f"Proposal pricing rejected for quote {quote_id}: {e}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error generating quote proposal: {str(e)}")
        return jsonify({'error': 'Failed to generate proposal'}), 500


@quotes_bp.route('/<int:quote_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_quote(quote_id):
    quote = get_quote_or_404(quote_id)
    if quote.status != 'draft':
        return jsonify({'error': 'Only draft quotes can be deleted'}), 400

    try:
        db.session.delete(quote)
        db.session.commit()
        logger.info(f"Deleted draft quote {quote_id}")
        return jsonify({'message': 'Quote deleted successfully'}), 200
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting quote {quote_id}: {str(e)}")
        return jsonify({'error': 'Failed to delete quote'}), 500
