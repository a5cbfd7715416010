"""
Co-Innovation Process Flow
Blueprint registry.
"""

from coinnovation.blueprints.flow_bp import flow_bp
from coinnovation.blueprints.health_bp import health_bp

ALL_BLUEPRINTS = (flow_bp, health_bp)
