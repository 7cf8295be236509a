# estate_filters/services.py
"""Normalize raw caller input into validated engine input.

Query strings and JSON bodies deliver ids as strings and filters as loose
mappings; everything is checked here so that no query runs on malformed
input.
"""
import json
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import crud, query, schemas
from .errors import ValidationFailure
from .utils import logger

Selection = Dict[int, List[int]]


def _as_id(raw: Any, what: str) -> int:
    if isinstance(raw, bool):
        raise ValidationFailure(f"Invalid {what}: {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailure(f"Invalid {what}: {raw!r}") from None


def normalize_selection(raw: Union[None, str, Mapping[Any, Any]]) -> Selection:
    """`{"3": ["7", 8], 4: 9}` (or its JSON text) -> `{3: [7, 8], 4: [9]}`."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationFailure(f"Filter selection is not valid JSON: {e}") from e
    if not isinstance(raw, Mapping):
        raise ValidationFailure("Filter selection must map group ids to value ids")
    selection: Selection = {}
    for group, values in raw.items():
        if values is None:
            continue
        if not isinstance(values, (list, tuple, set)):
            values = [values]
        selection[_as_id(group, "filter group id")] = [_as_id(v, "filter value id") for v in values]
    return selection


def parse_filters(raw: Optional[Mapping[str, Any]] = None) -> schemas.ListingFilters:
    # empty strings come from blank form fields and mean "no filter"
    cleaned = {k: v for k, v in (raw or {}).items() if v is not None and v != ""}
    try:
        return schemas.ListingFilters(**cleaned)
    except ValidationError as e:
        raise ValidationFailure(str(e)) from e


def search_listings(
    db: Session,
    selection: Any = None,
    filters: Optional[Mapping[str, Any]] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    parsed_selection = normalize_selection(selection)
    parsed_filters = parse_filters(filters)
    result = query.query_listings(db, parsed_selection, parsed_filters, page=page, page_size=page_size)
    logger.debug("Listing search matched %d listings", result["total"])
    return result


def assign_filters(db: Session, listing_id: int, selection: Any):
    return crud.sync_listing_filters(db, listing_id, normalize_selection(selection))
