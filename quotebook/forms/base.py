"""Binding JSON request bodies to Flask-WTF forms."""
from flask import request
from werkzeug.datastructures import MultiDict
from wtforms.validators import StopValidation

from quotebook.exceptions import ValidationError
from quotebook.services.pricing_service import MAX_AMOUNT, ZERO


def _formdata(data):
    pairs = []
    for key, value in (data or {}).items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        pairs.append((key, str(value)))
    return MultiDict(pairs)


class DecimalBounds:
    """Reject NaN, Infinity and values outside ``min``..``max``.

    Runs before any arithmetic so oversized or non-finite input surfaces as a field
    error rather than a ``decimal.InvalidOperation``.
    """

    def __init__(self, min=ZERO, max=MAX_AMOUNT, message=None):
        self.min = min
        self.max = max
        self.message = message

    def __call__(self, form, field):
        value = field.data
        if value is None:
            return
        if not value.is_finite():
            raise StopValidation(self.message or 'Enter a finite number.')
        if (self.min is not None and value < self.min) or value > self.max:
            if self.min is None:
                message = f'Must be at most {self.max}.'
            else:
                message = f'Must be between {self.min} and {self.max}.'
            raise StopValidation(self.message or message)


def bind_json(form_class, data, **kwargs):
    """Build ``form_class`` from a decoded JSON object. Nested values are ignored."""
    return form_class(formdata=_formdata(data), meta={'csrf': False}, **kwargs)


def validate_json(form_class, data, prefix=None, **kwargs):
    """Bind and validate; raise ValidationError carrying the field messages."""
    form = bind_json(form_class, data, **kwargs)
    if not form.validate():
        fields = form.errors
        if prefix:
            fields = {f'{prefix}.{name}': msgs for name, msgs in fields.items()}
        raise ValidationError('Please correct the highlighted fields.', fields=fields)
    return form


def json_body():
    """The request's JSON object; anything else is a validation error."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data
