"""Settings forms."""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, BooleanField
from wtforms.validators import DataRequired, Length, Optional

from quotebook.forms.base import DecimalBounds
from quotebook.forms.quote import PERCENT


class TaxRateForm(FlaskForm):
    region = StringField('Region *', validators=[DataRequired(), Length(1, 100)])
    tax_type = StringField('Tax Type', validators=[Optional(), Length(0, 20)], default='GST')
    cgst_rate = DecimalField('CGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    sgst_rate = DecimalField('SGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    igst_rate = DecimalField('IGST %', places=None, validators=[Optional(), DecimalBounds(max=PERCENT)])
    is_active = BooleanField('Active', default=True)
