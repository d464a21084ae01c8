"""
Expose ORM models for Django's auto-discovery while keeping real definitions
under the infrastructure module.
"""

from ordering.infra.models import *
from ordering.infra.outbox import ConfirmationOutbox
