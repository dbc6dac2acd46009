"""Dashboard figures and time-ranged quote analytics."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func

from quotebook import db
from quotebook.exceptions import ValidationError
from quotebook.models import Client, Invoice, Quote, QuoteStatus
from quotebook.services.pricing_service import ZERO, money

# Quotes whose totals count as won business
WON_STATUSES = (QuoteStatus.APPROVED.value, QuoteStatus.INVOICED.value)
MAX_TIME_RANGE = 60


def _shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _month_buckets(months, now=None):
    """(year, month) pairs for the last ``months`` months, oldest first, current month last."""
    now = now or datetime.utcnow()
    return [_shift_month(now.year, now.month, -i) for i in range(months - 1, -1, -1)]


def _rate(part, whole):
    if not whole:
        return '0.0'
    return str((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal('0.1')))


def _monthly(rows, buckets):
    """Fold (created_at, status, total) rows into per-month counts and won revenue."""
    data = {b: {'quotes': 0, 'conversions': 0, 'revenue': ZERO} for b in buckets}
    for created_at, status, total in rows:
        key = (created_at.year, created_at.month)
        if key not in data:
            continue
        data[key]['quotes'] += 1
        if status in WON_STATUSES:
            data[key]['conversions'] += 1
            data[key]['revenue'] += total or ZERO
    return [
        {
            'month': datetime(year, month, 1).strftime('%b'),
            'year': year,
            'quotes': data[(year, month)]['quotes'],
            'conversions': data[(year, month)]['conversions'],
            'revenue': str(money(data[(year, month)]['revenue'])),
        }
        for year, month in buckets
    ]


class AnalyticsService:
    @staticmethod
    def parse_time_range(value, default=12):
        if value in (None, ''):
            return default
        try:
            months = int(value)
        except (TypeError, ValueError):
            months = 0
        if not 1 <= months <= MAX_TIME_RANGE:
            raise ValidationError(
                'Invalid time range.',
                fields={'time_range': [f'Must be a whole number of months between 1 and {MAX_TIME_RANGE}.']},
            )
        return months

    @staticmethod
    def dashboard(now=None):
        total_quotes = Quote.query.count()
        won = Quote.query.filter(Quote.status.in_(WON_STATUSES))
        won_count = won.count()
        revenue = db.session.query(func.coalesce(func.sum(Quote.total), 0)).filter(
            Quote.status.in_(WON_STATUSES)
        ).scalar()
        invoiced, collected = db.session.query(
            func.coalesce(func.sum(Invoice.total), 0),
            func.coalesce(func.sum(Invoice.paid_amount), 0),
        ).one()

        recent = Quote.query.order_by(Quote.created_at.desc()).limit(5).all()
        by_status = (
            db.session.query(Quote.status, func.count(Quote.id))
            .group_by(Quote.status)
            .all()
        )

        buckets = _month_buckets(6, now)
        first_year, first_month = buckets[0]
        rows = (
            db.session.query(Quote.created_at, Quote.status, Quote.total)
            .filter(Quote.created_at >= datetime(first_year, first_month, 1))
            .all()
        )
        monthly = _monthly(rows, buckets)

        return {
            'total_quotes': total_quotes,
            'total_clients': Client.query.count(),
            'total_revenue': str(money(revenue)),
            'conversion_rate': _rate(won_count, total_quotes),
            'total_invoiced': str(money(invoiced)),
            'total_collected': str(money(collected)),
            'recent_quotes': [
                {
                    'id': q.id,
                    'quote_number': q.quote_number,
                    'client_name': q.client.name if q.client else None,
                    'total': str(money(q.total)),
                    'status': q.status,
                    'created_at': q.created_at.isoformat() if q.created_at else None,
                }
                for q in recent
            ],
            'quotes_by_status': [{'status': s, 'count': c} for s, c in by_status],
            'monthly_revenue': [{'month': m['month'], 'revenue': m['revenue']} for m in monthly],
        }

    @staticmethod
    def overview(time_range=12, now=None):
        """Quote analytics for the last ``time_range`` calendar months, current month included."""
        buckets = _month_buckets(time_range, now)
        first_year, first_month = buckets[0]
        cutoff = datetime(first_year, first_month, 1)
        in_range = Quote.created_at >= cutoff

        total_quotes, total_value = db.session.query(
            func.count(Quote.id), func.coalesce(func.sum(Quote.total), 0),
        ).filter(in_range).one()
        won_count, revenue = db.session.query(
            func.count(Quote.id), func.coalesce(func.sum(Quote.total), 0),
        ).filter(in_range, Quote.status.in_(WON_STATUSES)).one()

        rows = db.session.query(Quote.created_at, Quote.status, Quote.total).filter(in_range).all()

        top_clients = (
            db.session.query(
                Client.id,
                Client.name,
                func.sum(Quote.total).label('revenue'),
                func.count(Quote.id).label('quote_count'),
            )
            .join(Quote, Quote.client_id == Client.id)
            .filter(in_range, Quote.status.in_(WON_STATUSES))
            .group_by(Client.id, Client.name)
            .order_by(func.sum(Quote.total).desc())
            .limit(10)
            .all()
        )
        breakdown = (
            db.session.query(Quote.status, func.count(Quote.id), func.coalesce(func.sum(Quote.total), 0))
            .filter(in_range)
            .group_by(Quote.status)
            .all()
        )

        avg_value = money(Decimal(str(total_value)) / total_quotes) if total_quotes else money(0)
        return {
            'time_range': time_range,
            'overview': {
                'total_quotes': total_quotes,
                'total_revenue': str(money(revenue)),
                'avg_quote_value': str(avg_value),
                'conversion_rate': _rate(won_count, total_quotes),
            },
            'monthly_data': _monthly(rows, buckets),
            'top_clients': [
                {'id': cid, 'name': name, 'total_revenue': str(money(rev)), 'quote_count': count}
                for cid, name, rev, count in top_clients
            ],
            'status_breakdown': [
                {'status': s, 'count': c, 'value': str(money(v))} for s, c, v in breakdown
            ],
        }
