"""
Analytics API Routes - Split into domain-specific modules

This package organizes the analytics endpoints into logical domains:
- admin.py: ping and health
- slicers.py: slicer options per currency
- overview.py: summary KPIs, churn and time series
- auto_approval.py: automation and processing-time KPIs
- comparison.py: period A vs period B, per metric and per brand, plus CSV
- periods.py: previous-period resolution
- targets.py: business performance targets and audit log

All modules share the same blueprint (analytics_bp) registered at /api.
"""

from flask import Blueprint

# Create the shared blueprint
analytics_bp = Blueprint('analytics', __name__)


# Import all route modules to register their routes with the blueprint
# Order doesn't matter since Flask routes are matched by specificity
from routes.analytics import admin
from routes.analytics import slicers
from routes.analytics import overview
from routes.analytics import auto_approval
from routes.analytics import comparison
from routes.analytics import periods
from routes.analytics import targets
