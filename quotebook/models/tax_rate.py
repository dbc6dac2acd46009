"""Regional GST rate presets."""
import uuid
from datetime import datetime

from quotebook import db


class TaxRate(db.Model):
    __tablename__ = 'tax_rates'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    region = db.Column(db.String(100), nullable=False, unique=True, index=True)
    tax_type = db.Column(db.String(20), nullable=False, default='GST')
    cgst_rate = db.Column(db.Numeric(7, 4), default=0, nullable=False)
    sgst_rate = db.Column(db.Numeric(7, 4), default=0, nullable=False)
    igst_rate = db.Column(db.Numeric(7, 4), default=0, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<TaxRate {self.region}>'
