"""Payment history entries blueprint."""
from flask import Blueprint

payments_bp = Blueprint('payments', __name__)

from quotebook.blueprints.payments import routes  # noqa: E402,F401
