"""Catalogue bounded context: the products the store sells and their prices."""

import structlog
from protean.domain import Domain

catalogue = Domain(name="catalogue")

logger = structlog.get_logger(__name__)
