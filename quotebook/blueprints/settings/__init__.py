"""Settings, tax rates and activity log blueprint."""
from flask import Blueprint

settings_bp = Blueprint('settings', __name__)

from quotebook.blueprints.settings import routes  # noqa: E402,F401
