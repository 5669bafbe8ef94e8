"""
Request bodies for the analytics API.

Invoices arrive already fetched from the invoice store; the API only
computes over them.
"""

from typing import List

from pydantic import Field

from models.base import BaseSchema
from models.invoice import Invoice
from models.visit_prep import CatalogProduct


class ClientAnalyticsRequest(BaseSchema):
    """Invoice snapshot for one client."""

    invoices: List[Invoice] = Field(default_factory=list, description="Client invoices")


class VisitPrepRequest(ClientAnalyticsRequest):
    """Invoice snapshot plus the catalog to compare against."""

    catalog: List[CatalogProduct] = Field(default_factory=list, description="Products on offer")
