"""Invoice and payment forms."""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, SelectField, TextAreaField, DateField, BooleanField
from wtforms.validators import DataRequired, InputRequired, Email, Length, Optional

from quotebook.forms.base import DecimalBounds
from quotebook.models import PaymentHistory, PaymentStatus


class PaymentForm(FlaskForm):
    amount = DecimalField('Amount *', places=2, validators=[InputRequired(), DecimalBounds(min=None)])
    payment_method = SelectField(
        'Payment Method *',
        choices=list(PaymentHistory.METHOD_LABELS.items()),
        validators=[DataRequired()],
    )
    payment_date = DateField('Payment Date', validators=[Optional()], format='%Y-%m-%d')
    transaction_id = StringField('Transaction ID', validators=[Optional(), Length(0, 120)])
    notes = TextAreaField('Notes', validators=[Optional()])
    apply_status = BooleanField('Update payment status', default=False)


class PaymentStatusForm(FlaskForm):
    payment_status = SelectField(
        'Payment Status *',
        choices=[(s.value, s.value.title()) for s in PaymentStatus],
        validators=[DataRequired()],
    )


class SendDocumentForm(FlaskForm):
    """Recipient defaults to the client's email when left blank."""
    email = StringField('To', validators=[Optional(), Email()])
    message = TextAreaField('Message', validators=[Optional()])
