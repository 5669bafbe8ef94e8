"""
Invoice loading at the analytics boundary.

Validates raw invoice records against the Invoice schema. Malformed
records are skipped and logged, or rejected outright in strict mode.
"""

from typing import Any, Iterable, List, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import InvoiceValidationError
from models.invoice import Invoice

logger = structlog.get_logger(__name__)


def _format_errors(exc: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "record",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]


def load_invoices(
    records: Iterable[Union[Invoice, dict[str, Any]]],
    strict: bool = False,
) -> List[Invoice]:
    """
    Validate invoice records.

    Args:
        records: Invoice instances or raw dicts from the invoice store
        strict: Raise on the first malformed record instead of skipping it

    Returns:
        Valid invoices in input order

    Raises:
        InvoiceValidationError: In strict mode, for a malformed record
    """
    invoices: List[Invoice] = []
    rejected = 0

    for index, record in enumerate(records):
        if isinstance(record, Invoice):
            invoices.append(record)
            continue
        try:
            invoices.append(Invoice.model_validate(record))
        except PydanticValidationError as e:
            errors = _format_errors(e)
            if strict:
                raise InvoiceValidationError(index, errors)
            rejected += 1
            logger.warning("invoice_rejected", index=index, errors=errors)

    if rejected:
        logger.warning("invoices_rejected", count=rejected, accepted=len(invoices))
    return invoices
