"""Quote forms."""
from decimal import Decimal

from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, IntegerField, SelectField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, NumberRange

from quotebook.forms.base import DecimalBounds
from quotebook.models import QuoteStatus

PERCENT = Decimal('100')


class QuoteItemForm(FlaskForm):
    description = TextAreaField('Description *', validators=[DataRequired()])
    quantity = IntegerField('Quantity *', validators=[InputRequired(), NumberRange(min=1, max=1000000)])
    unit_price = DecimalField('Unit Price *', validators=[InputRequired(), DecimalBounds()])


class PricingForm(FlaskForm):
    """Rates and charges applied on top of the line items."""
    discount_percent = DecimalField('Discount %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    cgst_percent = DecimalField('CGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    sgst_percent = DecimalField('SGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    igst_percent = DecimalField('IGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    shipping_charges = DecimalField('Shipping', places=2, validators=[Optional(), DecimalBounds()])
    tax_rate_id = StringField('Tax Rate', validators=[Optional()])

    def pricing_data(self):
        return {
            'discount_percent': self.discount_percent.data,
            'cgst_percent': self.cgst_percent.data,
            'sgst_percent': self.sgst_percent.data,
            'igst_percent': self.igst_percent.data,
            'shipping_charges': self.shipping_charges.data,
            'tax_rate_id': self.tax_rate_id.data or None,
        }


class QuoteForm(PricingForm):
    client_id = StringField('Client *', validators=[DataRequired()])
    validity_days = IntegerField('Valid For (days)', validators=[Optional(), NumberRange(min=1, max=365)])
    reference_number = StringField('Reference', validators=[Optional(), Length(0, 100)])
    attention_to = StringField('Attention To', validators=[Optional(), Length(0, 200)])
    notes = TextAreaField('Notes', validators=[Optional()])
    terms_and_conditions = TextAreaField('Terms & Conditions', validators=[Optional()])


class QuoteStatusForm(FlaskForm):
    status = SelectField(
        'Status *',
        choices=[(s.value, s.value.title()) for s in QuoteStatus],
        validators=[DataRequired()],
    )
