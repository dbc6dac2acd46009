"""Quotes blueprint."""
from flask import Blueprint

quotes_bp = Blueprint('quotes', __name__)

from quotebook.blueprints.quotes import routes  # noqa: E402,F401
