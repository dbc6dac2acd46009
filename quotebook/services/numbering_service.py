"""Quote and invoice number generation."""
from datetime import datetime

from flask import current_app
from sqlalchemy import func

from quotebook import db
from quotebook.models import Quote, Invoice, Setting


def _like_escape(text):
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class NumberingService:
    @staticmethod
    def _next_sequence(prefix, model_class, number_column, date_part):
        column = getattr(model_class, number_column)
        pattern = f"{_like_escape(prefix)}-{date_part}-%"
        # Sequences grow past four digits, so longer numbers sort first
        last = (
            db.session.query(column)
            .filter(column.like(pattern, escape='\\'))
            .order_by(func.length(column).desc(), column.desc())
            .first()
        )
        if last:
            seq = int(last[0].rsplit("-", 1)[-1]) + 1
        else:
            seq = 1
        return f"{prefix}-{date_part}-{seq:04d}"

    @staticmethod
    def _prefix(setting_key, config_key):
        prefix = Setting.get(setting_key) or current_app.config[config_key]
        return prefix.strip().upper()

    @staticmethod
    def next_quote_number():
        date_part = datetime.utcnow().strftime("%Y%m")
        return NumberingService._next_sequence(
            NumberingService._prefix('quote_prefix', 'QUOTE_NUMBER_PREFIX'),
            Quote, "quote_number", date_part,
        )

    @staticmethod
    def next_invoice_number():
        date_part = datetime.utcnow().strftime("%Y%m")
        return NumberingService._next_sequence(
            NumberingService._prefix('invoice_prefix', 'INVOICE_NUMBER_PREFIX'),
            Invoice, "invoice_number", date_part,
        )
