"""Invoices and payments blueprint."""
from flask import Blueprint

invoices_bp = Blueprint('invoices', __name__)

from quotebook.blueprints.invoices import routes  # noqa: E402,F401
