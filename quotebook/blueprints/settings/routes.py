"""Settings routes (company profile, numbering, tax rates, audit log)."""
import re

from flask import jsonify, request
from flask_login import login_required, current_user

from quotebook import db
from quotebook.blueprints.settings import settings_bp
from quotebook.decorators import role_required, settings_required
from quotebook.exceptions import ValidationError
from quotebook.forms import TaxRateForm, json_body, validate_json
from quotebook.models import Setting, TaxRate
from quotebook.serializers import serialize_audit, serialize_tax_rate
from quotebook.services.audit_service import AuditService

SETTING_CATEGORIES = {
    'company_name': 'company',
    'company_address': 'company',
    'company_phone': 'company',
    'company_email': 'company',
    'company_gstin': 'company',
    'currency': 'general',
    'quote_prefix': 'numbering',
    'invoice_prefix': 'numbering',
    'payment_terms_days': 'invoicing',
}
PREFIX_RE = re.compile(r'^[A-Za-z0-9]{1,10}$')


def _check_setting(key, value):
    if key not in SETTING_CATEGORIES:
        return 'Unknown setting.'
    if value in (None, ''):
        return None
    if key in ('quote_prefix', 'invoice_prefix') and not PREFIX_RE.match(str(value)):
        return 'Use 1 to 10 letters or digits.'
    if key == 'payment_terms_days':
        try:
            if int(value) < 0:
                raise ValueError(value)
        except (TypeError, ValueError):
            return 'Must be a whole number of days.'
    return None


@settings_bp.route('', methods=['GET'])
@login_required
def index():
    return jsonify(Setting.as_dict())


@settings_bp.route('', methods=['POST'])
@login_required
@settings_required
def save():
    data = json_body()
    errors = {}
    for key, value in data.items():
        message = _check_setting(key, value)
        if message:
            errors[key] = [message]
    if errors:
        raise ValidationError('Invalid settings.', fields=errors)
    for key, value in data.items():
        Setting.set(key, value, SETTING_CATEGORIES[key], current_user.id, commit=False)
    db.session.commit()
    AuditService.log('settings.update', 'Setting', None, ', '.join(sorted(data)), current_user.id)
    return jsonify(Setting.as_dict())


def _apply_tax_rate(rate, form):
    rate.region = form.region.data.strip()
    rate.tax_type = (form.tax_type.data or 'GST').strip()
    rate.cgst_rate = form.cgst_rate.data or 0
    rate.sgst_rate = form.sgst_rate.data or 0
    rate.igst_rate = form.igst_rate.data or 0
    rate.is_active = form.is_active.data


def _ensure_unique_region(region, exclude_id=None):
    query = TaxRate.query.filter(db.func.lower(TaxRate.region) == region.strip().lower())
    if exclude_id:
        query = query.filter(TaxRate.id != exclude_id)
    if query.first() is not None:
        raise ValidationError('Duplicate region.', fields={'region': ['A tax rate for this region already exists.']})


@settings_bp.route('/tax-rates', methods=['GET'])
@login_required
def tax_rates():
    query = TaxRate.query
    if request.args.get('active') in ('1', 'true'):
        query = query.filter_by(is_active=True)
    return jsonify([serialize_tax_rate(r) for r in query.order_by(TaxRate.region).all()])


@settings_bp.route('/tax-rates', methods=['POST'])
@login_required
@settings_required
def create_tax_rate():
    data = json_body()
    data.setdefault('is_active', True)
    form = validate_json(TaxRateForm, data)
    _ensure_unique_region(form.region.data)
    rate = TaxRate()
    _apply_tax_rate(rate, form)
    db.session.add(rate)
    db.session.commit()
    AuditService.log('tax_rate.create', 'TaxRate', rate.id, rate.region, current_user.id)
    return jsonify(serialize_tax_rate(rate)), 201


@settings_bp.route('/tax-rates/<rate_id>', methods=['PUT'])
@login_required
@settings_required
def update_tax_rate(rate_id):
    rate = db.get_or_404(TaxRate, rate_id)
    data = json_body()
    data.setdefault('is_active', rate.is_active)
    form = validate_json(TaxRateForm, data)
    _ensure_unique_region(form.region.data, exclude_id=rate.id)
    _apply_tax_rate(rate, form)
    db.session.commit()
    AuditService.log('tax_rate.update', 'TaxRate', rate.id, rate.region, current_user.id)
    return jsonify(serialize_tax_rate(rate))


@settings_bp.route('/tax-rates/<rate_id>', methods=['DELETE'])
@login_required
@settings_required
def delete_tax_rate(rate_id):
    # Quotes keep their own copy of the percentages, so removing a preset changes no totals.
    rate = db.get_or_404(TaxRate, rate_id)
    region = rate.region
    db.session.delete(rate)
    db.session.commit()
    AuditService.log('tax_rate.delete', 'TaxRate', rate_id, region, current_user.id)
    return jsonify({'success': True})


@settings_bp.route('/audit-log')
@login_required
@role_required('admin')
def audit_log():
    limit = min(request.args.get('limit', 50, type=int), 500)
    user_id = request.args.get('user_id') or None
    return jsonify([serialize_audit(e) for e in AuditService.recent(limit=limit, user_id=user_id)])
