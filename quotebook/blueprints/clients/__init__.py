"""Client management blueprint."""
from flask import Blueprint

clients_bp = Blueprint('clients', __name__)

from quotebook.blueprints.clients import routes  # noqa: E402,F401
