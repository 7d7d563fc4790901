# Overview: Service-layer allocation of sequential document numbers (SO-0001, PO-0001).

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import DocumentSequence
from .concurrency import lock_for_update


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def parse_document_number(value: str | None, prefix: str) -> int:
    """Numeric suffix of "<prefix>-<digits>", or 0 when it does not match."""
    if not value or not value.startswith(f"{prefix}-"):
        return 0
    suffix = value[len(prefix) + 1:]
    return int(suffix) if suffix.isdigit() else 0


def max_existing_number(number_column, prefix: str) -> int:
    """
    Highest numeric suffix among existing documents with this prefix.

    Longer strings sort first so SO-10000 outranks SO-9999.
    """
    rows = (
        db.session.query(number_column)
        .filter(number_column.like(f"{prefix}-%"))
        .order_by(func.length(number_column).desc(), number_column.desc())
    )
    # Skip hand-entered numbers such as PO-ACME-7
    for (value,) in rows:
        number = parse_document_number(value, prefix)
        if number:
            return number
    return 0


def next_document_number(
    *,
    document_type: str,
    prefix: str,
    number_column,
    pad: int = 4,
) -> str:
    """
    Allocate the next document number inside the caller's transaction.

    The sequence row is locked for update, so two concurrent allocations
    serialize; the number is never below max(existing) + 1 so rows inserted
    outside the sequence (imports, seeds) are skipped over. Does not commit.
    """
    if not document_type:
        raise DocumentSequenceError("document_type is required")

    seq = lock_for_update(
        db.session.query(DocumentSequence).filter_by(document_type=document_type)
    ).first()

    floor = max_existing_number(number_column, prefix) + 1
    if seq is None:
        seq = DocumentSequence(document_type=document_type, next_number=floor)
        db.session.add(seq)

    number = max(seq.next_number, floor)
    seq.next_number = number + 1
    db.session.flush()

    return f"{prefix}-{number:0{pad}d}"
