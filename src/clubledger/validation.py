"""Validation layer between the HTTP client and the aggregator.

Validates raw JSON rows against Pydantic models. Rows that fail are
quarantined (logged and returned to the caller for reporting) so that one
bad row does not blank a whole report, unless strict handling is requested.

Usage::

    from clubledger.validation import validate_records
    from clubledger.models import MatchCostRecord

    records, quarantined = validate_records(rows, MatchCostRecord, ctx)
"""

import json
import logging
import warnings
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ValidationError

from clubledger.exceptions import MalformedRecordError

logger = logging.getLogger(__name__)


@dataclass
class QuarantinedRecord:
    """A row that failed validation, kept for diagnostics."""

    entity_type: str
    raw_data: str
    error_details: str
    quarantined_at: str
    endpoint: str | None = None


def validate_record(
    data: dict,
    model_cls: type[BaseModel],
    context: dict,
    quarantine: list[QuarantinedRecord] | None = None,
    *,
    strict: bool = False,
) -> BaseModel | None:
    """Validate a dict against a Pydantic model, quarantining failures.

    Args:
        data: Raw row as decoded from JSON.
        model_cls: Pydantic model class (e.g. MatchCostRecord).
        context: Dict with an ``endpoint`` key for log messages.
        quarantine: List to append failed rows to. If None, failures are
            only logged.
        strict: Raise MalformedRecordError instead of quarantining.

    Returns:
        The model instance on success, or ``None`` if the row was quarantined.
    """
    endpoint = context.get("endpoint")

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            model = model_cls.model_validate(data)

        # Soft-validation warnings do not reject the row
        for w in caught:
            logger.warning(
                "Validation warning for %s (%s): %s",
                model_cls.__name__,
                endpoint,
                w.message,
            )

        return model

    except ValidationError as e:
        if strict:
            raise MalformedRecordError(
                f"Invalid {model_cls.__name__} from {endpoint}: {e}",
                raw_data=data,
            ) from e

        logger.error(
            "Validation failed for %s (%s), skipping row: %s",
            model_cls.__name__,
            endpoint,
            e,
        )

        if quarantine is not None:
            quarantine.append(
                QuarantinedRecord(
                    entity_type=model_cls.__name__,
                    raw_data=json.dumps(data, default=str),
                    error_details=str(e),
                    quarantined_at=datetime.now(timezone.utc).isoformat(),
                    endpoint=endpoint,
                )
            )

        return None


def validate_records(
    items: list,
    model_cls: type[BaseModel],
    context: dict,
    *,
    strict: bool = False,
) -> tuple[list, list[QuarantinedRecord]]:
    """Validate a list of rows, returning valid models and quarantined rows.

    Args:
        items: Decoded JSON array.
        model_cls: Pydantic model class.
        context: Dict with an ``endpoint`` key.
        strict: Fail on the first invalid row.

    Returns:
        Tuple of (list of model instances, list of QuarantinedRecord).

    Raises:
        MalformedRecordError: ``strict`` and a row is invalid, or the payload
            is not a JSON array.
    """
    if not isinstance(items, list):
        raise MalformedRecordError(
            f"Expected a JSON array from {context.get('endpoint')}, "
            f"got {type(items).__name__}"
        )

    valid: list = []
    quarantined: list[QuarantinedRecord] = []

    for item in items:
        if not isinstance(item, dict):
            if strict:
                raise MalformedRecordError(
                    f"Expected an object row, got {type(item).__name__}"
                )
            logger.error("Skipping non-object row from %s: %r", context.get("endpoint"), item)
            quarantined.append(
                QuarantinedRecord(
                    entity_type=model_cls.__name__,
                    raw_data=json.dumps(item, default=str),
                    error_details="row is not an object",
                    quarantined_at=datetime.now(timezone.utc).isoformat(),
                    endpoint=context.get("endpoint"),
                )
            )
            continue

        result = validate_record(item, model_cls, context, quarantined, strict=strict)
        if result is not None:
            valid.append(result)

    if quarantined:
        logger.warning(
            "%d of %d %s rows from %s were malformed and skipped",
            len(quarantined),
            len(items),
            model_cls.__name__,
            context.get("endpoint"),
        )

    return valid, quarantined
