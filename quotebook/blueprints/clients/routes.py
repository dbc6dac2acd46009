"""Client routes."""
from flask import current_app, jsonify, request
from flask_login import login_required, current_user

from quotebook import db
from quotebook.blueprints.clients import clients_bp
from quotebook.decorators import editor_required
from quotebook.exceptions import StateError
from quotebook.forms import ClientForm, json_body, validate_json
from quotebook.models import Client, Quote
from quotebook.serializers import serialize_client, serialize_quote
from quotebook.services.audit_service import AuditService

CLIENT_FIELDS = ('name', 'email', 'phone', 'billing_address', 'shipping_address', 'gstin', 'contact_person')


def _apply(client, form):
    for field in CLIENT_FIELDS:
        value = getattr(form, field).data
        setattr(client, field, value.strip() if value else None)
    if client.gstin:
        client.gstin = client.gstin.upper()


@clients_bp.route('', methods=['GET'])
@login_required
def index():
    page = request.args.get('page', 1, type=int)
    search = request.args.get('q', '').strip()
    query = Client.query
    if search:
        query = query.filter(
            db.or_(
                Client.name.ilike(f'%{search}%'),
                Client.email.ilike(f'%{search}%'),
                Client.gstin.ilike(f'%{search}%'),
            )
        )
    clients = query.order_by(Client.name).paginate(
        page=page, per_page=current_app.config['ITEMS_PER_PAGE'], error_out=False,
    )
    return jsonify({
        'items': [serialize_client(c) for c in clients.items],
        'total': clients.total,
        'page': clients.page,
        'pages': clients.pages,
    })


@clients_bp.route('', methods=['POST'])
@login_required
@editor_required
def create():
    form = validate_json(ClientForm, json_body())
    client = Client(created_by_id=current_user.id)
    _apply(client, form)
    db.session.add(client)
    db.session.commit()
    AuditService.log('client.create', 'Client', client.id, client.name, current_user.id)
    return jsonify(serialize_client(client)), 201


@clients_bp.route('/<client_id>', methods=['GET'])
@login_required
def detail(client_id):
    client = db.get_or_404(Client, client_id)
    data = serialize_client(client)
    data['quotes'] = [serialize_quote(q) for q in client.quotes.order_by(Quote.created_at.desc()).all()]
    return jsonify(data)


@clients_bp.route('/<client_id>', methods=['PUT'])
@login_required
@editor_required
def update(client_id):
    client = db.get_or_404(Client, client_id)
    form = validate_json(ClientForm, json_body())
    _apply(client, form)
    db.session.commit()
    AuditService.log('client.update', 'Client', client.id, client.name, current_user.id)
    return jsonify(serialize_client(client))


@clients_bp.route('/<client_id>', methods=['DELETE'])
@login_required
@editor_required
def delete(client_id):
    client = db.get_or_404(Client, client_id)
    if client.quotes.count() > 0:
        raise StateError('Client has quotes and cannot be deleted.')
    name = client.name
    db.session.delete(client)
    db.session.commit()
    AuditService.log('client.delete', 'Client', client_id, name, current_user.id)
    return jsonify({'success': True})
