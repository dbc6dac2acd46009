"""Client forms."""
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional


class ClientForm(FlaskForm):
    name = StringField('Client Name *', validators=[DataRequired(), Length(1, 200)])
    email = StringField('Email *', validators=[DataRequired(), Email()])
    phone = StringField('Phone', validators=[Optional(), Length(0, 50)])
    billing_address = TextAreaField('Billing Address', validators=[Optional()])
    shipping_address = TextAreaField('Shipping Address', validators=[Optional()])
    gstin = StringField('GSTIN', validators=[Optional(), Length(0, 20)])
    contact_person = StringField('Contact Person', validators=[Optional(), Length(0, 120)])
