"""Dashboard and analytics routes."""
from flask import jsonify, request
from flask_login import login_required

from quotebook.blueprints.analytics import analytics_bp
from quotebook.services import AnalyticsService


@analytics_bp.route('/dashboard')
@login_required
def dashboard():
    return jsonify(AnalyticsService.dashboard())


@analytics_bp.route('')
@login_required
def index():
    months = AnalyticsService.parse_time_range(request.args.get('time_range'))
    return jsonify(AnalyticsService.overview(months))
