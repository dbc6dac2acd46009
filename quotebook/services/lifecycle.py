"""Quote status lifecycle.

Every code path that changes a quote asks this module first; the transition table
below is the only place the legal moves are written down.
"""
import logging

from quotebook.exceptions import StateError, ValidationError
from quotebook.models.quote import QuoteStatus

logger = logging.getLogger(__name__)

TRANSITIONS = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT}),
    QuoteStatus.SENT: frozenset({QuoteStatus.APPROVED, QuoteStatus.REJECTED}),
    QuoteStatus.APPROVED: frozenset({QuoteStatus.INVOICED}),
    QuoteStatus.REJECTED: frozenset(),
    QuoteStatus.INVOICED: frozenset(),
}

EDITABLE_STATUSES = frozenset({QuoteStatus.DRAFT, QuoteStatus.SENT})
TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

# Reachable only through QuoteService.convert_to_invoice
CONVERSION_ONLY = frozenset({QuoteStatus.INVOICED})


def parse_status(value):
    if isinstance(value, QuoteStatus):
        return value
    try:
        return QuoteStatus(value)
    except ValueError:
        allowed = ', '.join(s.value for s in QuoteStatus)
        raise ValidationError(
            f'Unknown quote status "{value}".',
            fields={'status': [f'Must be one of: {allowed}.']},
        )


def can_transition(current, target):
    return parse_status(target) in TRANSITIONS[parse_status(current)]


def ensure_transition(current, target, via_conversion=False):
    """Raise StateError unless ``current -> target`` is legal."""
    current = parse_status(current)
    target = parse_status(target)
    if target in CONVERSION_ONLY and not via_conversion:
        raise StateError(
            'A quote becomes invoiced only by converting it to an invoice.'
        )
    if target not in TRANSITIONS[current]:
        logger.info('Rejected quote transition %s -> %s', current.value, target.value)
        raise StateError(
            f'Cannot change quote status from {current.value} to {target.value}.'
        )
    return target


def ensure_editable(status):
    status = parse_status(status)
    if status not in EDITABLE_STATUSES:
        raise StateError(
            f'Quote is {status.value} and can no longer be edited.'
        )


def ensure_convertible(status):
    status = parse_status(status)
    if status is QuoteStatus.INVOICED:
        raise StateError('Quote has already been converted to an invoice.')
    if status is not QuoteStatus.APPROVED:
        raise StateError(
            f'Only approved quotes can be converted; this quote is {status.value}.'
        )
