"""Dashboard and analytics blueprint."""
from flask import Blueprint

analytics_bp = Blueprint('analytics', __name__)

from quotebook.blueprints.analytics import routes  # noqa: E402,F401
