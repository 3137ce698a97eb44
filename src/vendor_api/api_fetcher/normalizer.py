from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

# Probed in this order when an endpoint declares no itemsPath.
CANDIDATE_ITEM_KEYS = ("issues", "values", "data", "elements", "results", "items")

RecordDecoder = Callable[[Any], Any]


def extract_items(payload: Any, items_path: Optional[str] = None) -> List[Any]:
    """
    Pull the record array out of one page payload.

    Best effort, never raises:
      - payload[items_path] when it is a list
      - else the first list found under issues/values/data/elements/results/items
      - else the whole payload as a single record

    A guess that picks the wrong key simply yields records of an unexpected
    shape. A list payload is already a record array; an empty body yields
    nothing.
    """
    if payload is None:
        return []

    if isinstance(payload, list):
        return list(payload)

    if isinstance(payload, dict):
        if items_path:
            declared = payload.get(items_path)
            if isinstance(declared, list):
                return list(declared)

        for key in CANDIDATE_ITEM_KEYS:
            val = payload.get(key)
            if isinstance(val, list):
                return list(val)

    return [payload]


def decode_records(
    records: List[Any], decoders: Optional[Sequence[RecordDecoder]] = None
) -> List[Any]:
    """
    Final pass over the accumulated records.

    Each decoder receives one record and returns its replacement; decoders
    run in order. Without decoders the list is returned unchanged.
    """
    if not decoders:
        return records

    decoded = []
    for record in records:
        for decoder in decoders:
            record = decoder(record)
        decoded.append(record)
    return decoded

