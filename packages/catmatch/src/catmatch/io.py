"""Requested-item ingestion, catalog loading and result export."""

from __future__ import annotations

import json
import re
import time
import warnings
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
import structlog
from pydantic import ValidationError

from catmatch.errors import CatalogLoadError, InputFileError
from catmatch.schemas import CatalogEntry, RequestedItem
from catmatch.types import ItemOutcome

log = structlog.get_logger()

NAME_HEADERS = ["name", "item", "product", "description", "item name", "product name"]
QUANTITY_HEADERS = ["quantity", "qty", "amount", "count", "units"]
UOM_HEADERS = ["unit", "uom", "unit of measure", "measure"]
PRICE_HEADERS = ["price", "unit price", "cost", "amount", "estimated price"]
DESCRIPTION_HEADERS = ["description", "desc", "details", "notes"]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_QTY = re.compile(r"^(\d+)\s+(.+)")
_TRAILING_QTY = re.compile(r"(.+?)\s*[x×]\s*(\d+)$", re.IGNORECASE)
_DASH_QTY = re.compile(
    r"(.+?)\s*-\s*(\d+)\s*(ea|each|units?|boxes?|packs?|cases?)?$", re.IGNORECASE
)
_NAME_PREFIX = re.compile(r"^(of|x)\s+", re.IGNORECASE)
_TEXT_SEPARATORS = re.compile(r"[,;\n]")


@dataclass
class ParseStats:
    duplicates_found: int = 0
    duplicate_names: list[str] = field(default_factory=list)
    missing_quantities: int = 0
    missing_quantity_items: list[str] = field(default_factory=list)
    columns_detected: list[str] = field(default_factory=list)
    parse_time_ms: float = 0.0
    original_row_count: int = 0
    consolidated_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "duplicatesFound": self.duplicates_found,
            "duplicateNames": self.duplicate_names,
            "missingQuantities": self.missing_quantities,
            "missingQuantityItems": self.missing_quantity_items,
            "columnsDetected": self.columns_detected,
            "parseTimeMs": round(self.parse_time_ms, 3),
            "originalRowCount": self.original_row_count,
            "consolidatedCount": self.consolidated_count,
        }


@dataclass
class ParsedFile:
    items: list[RequestedItem]
    file_name: str
    row_count: int
    stats: ParseStats = field(default_factory=ParseStats)


def find_column_index(headers: list[str], possible_names: list[str]) -> int:
    """First header containing a candidate name, trying candidates in order."""
    for name in possible_names:
        for i, h in enumerate(headers):
            if name in h:
                return i
    return -1


def parse_quantity(raw: str | None) -> int | None:
    """Leading integer of a cell, or None if missing or not positive."""
    if not raw:
        return None
    m = _LEADING_INT.match(raw)
    if not m:
        return None
    value = int(m.group(1))
    return value if value > 0 else None


def consolidate_duplicates(
    items: list[RequestedItem],
) -> tuple[list[RequestedItem], int, list[str]]:
    """Merge items with the same case-insensitive name, summing quantities."""
    seen: dict[str, RequestedItem] = {}
    duplicate_names: list[str] = []
    duplicates_found = 0

    for item in items:
        key = item.name.lower().strip()
        if key in seen:
            existing = seen[key]
            seen[key] = existing.model_copy(
                update={"quantity": existing.quantity + item.quantity}
            )
            duplicates_found += 1
            if item.name not in duplicate_names:
                duplicate_names.append(item.name)
        else:
            seen[key] = item

    return list(seen.values()), duplicates_found, duplicate_names


def _cell(row: list[str], idx: int) -> str | None:
    if idx < 0 or idx >= len(row):
        return None
    return row[idx].strip()


def _parse_rows(rows: list[list[str]], file_name: str, start: float) -> ParsedFile:
    if not rows:
        return ParsedFile(items=[], file_name=file_name, row_count=0,
                          stats=ParseStats(parse_time_ms=_elapsed_ms(start)))

    headers = [h.strip().lower().replace('"', "") for h in rows[0]]
    name_idx = find_column_index(headers, NAME_HEADERS)
    qty_idx = find_column_index(headers, QUANTITY_HEADERS)
    uom_idx = find_column_index(headers, UOM_HEADERS)
    price_idx = find_column_index(headers, PRICE_HEADERS)
    desc_idx = find_column_index(headers, DESCRIPTION_HEADERS)

    columns_detected: list[str] = []
    for idx, label in [
        (name_idx, "Item Name"),
        (qty_idx, "Quantity"),
        (uom_idx, "Unit of Measure"),
        (price_idx, "Price"),
        (desc_idx, "Description"),
    ]:
        if idx >= 0:
            columns_detected.append(label)

    raw_items: list[RequestedItem] = []
    missing_quantity_items: list[str] = []
    for row in rows[1:]:
        if not any(v.strip() for v in row):
            continue
        name = _cell(row, name_idx if name_idx >= 0 else 0)
        if not name:
            continue
        quantity = parse_quantity(_cell(row, qty_idx))
        if quantity is None:
            missing_quantity_items.append(name)
        raw_items.append(RequestedItem(
            name=name,
            quantity=quantity or 1,
            unit_of_measure=_cell(row, uom_idx) or None,
            description=_cell(row, desc_idx) or None,
            estimated_price=_cell(row, price_idx) or None,
        ))

    items, duplicates_found, duplicate_names = consolidate_duplicates(raw_items)
    stats = ParseStats(
        duplicates_found=duplicates_found,
        duplicate_names=duplicate_names,
        missing_quantities=len(missing_quantity_items),
        missing_quantity_items=missing_quantity_items[:5],
        columns_detected=columns_detected,
        parse_time_ms=_elapsed_ms(start),
        original_row_count=len(raw_items),
        consolidated_count=len(items),
    )
    log.info(
        "requested_items_parsed",
        file=file_name,
        rows=len(raw_items),
        items=len(items),
        duplicates=duplicates_found,
        missing_quantities=stats.missing_quantities,
    )
    return ParsedFile(items=items, file_name=file_name, row_count=len(items), stats=stats)


def _frame_rows(df: pd.DataFrame) -> list[list[str]]:
    df = df.fillna("")
    return [[str(v) for v in row] for row in df.itertuples(index=False, name=None)]


def _keep_row(fields: list[str]) -> list[str]:
    # Rows wider than the header are kept; pandas drops the extra cells.
    return fields


def parse_csv(path: str | Path) -> ParsedFile:
    """Parse a CSV requested-item list; the first row is the header.

    Rows with more cells than the header (an unquoted comma in a name, a
    trailing extra cell) are kept and truncated to the header width.
    """
    start = time.perf_counter()
    path = Path(path)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False,
                             skip_blank_lines=True, engine="python",
                             on_bad_lines=_keep_row)
    except pd.errors.EmptyDataError:
        return _parse_rows([], path.name, start)
    except pd.errors.ParserError as e:
        raise InputFileError(f"cannot parse {path.name}: {e}") from e
    return _parse_rows(_frame_rows(df), path.name, start)


def parse_excel(path: str | Path) -> ParsedFile:
    """Parse the first sheet of a spreadsheet; the first row is the header."""
    start = time.perf_counter()
    path = Path(path)
    df = pd.read_excel(path, sheet_name=0, header=None, dtype=str)
    return _parse_rows(_frame_rows(df), path.name, start)


def parse_text_input(text: str) -> ParsedFile:
    """Parse free text such as "12 trash bags, gloves x 4; mop heads - 6 each"."""
    start = time.perf_counter()
    items: list[RequestedItem] = []

    lines = [line.strip() for line in _TEXT_SEPARATORS.split(text)]
    for line in filter(None, lines):
        name: str | None = None
        quantity = 1
        if m := _LEADING_QTY.search(line):
            name = _NAME_PREFIX.sub("", m.group(2)).strip()
            quantity = int(m.group(1)) or 1
        elif m := _TRAILING_QTY.search(line):
            name = m.group(1).strip()
            quantity = int(m.group(2)) or 1
        elif m := _DASH_QTY.search(line):
            name = m.group(1).strip()
            quantity = int(m.group(2)) or 1
        elif len(line) > 2:
            name = line
        if name:
            items.append(RequestedItem(name=name, quantity=quantity))

    consolidated, duplicates_found, duplicate_names = consolidate_duplicates(items)
    stats = ParseStats(
        duplicates_found=duplicates_found,
        duplicate_names=duplicate_names,
        columns_detected=["Natural Language"],
        parse_time_ms=_elapsed_ms(start),
        original_row_count=len(items),
        consolidated_count=len(consolidated),
    )
    return ParsedFile(
        items=consolidated, file_name="text-input", row_count=len(consolidated), stats=stats
    )


def read_requested_items(path: str | Path) -> ParsedFile:
    """Parse a requested-item file, dispatching on its suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return parse_csv(path)
    if suffix in (".xlsx", ".xls"):
        return parse_excel(path)
    if suffix == ".txt":
        parsed = parse_text_input(path.read_text(encoding="utf-8"))
        parsed.file_name = path.name
        return parsed
    raise InputFileError(f"unsupported requested-item file type: {path.name}")


def _clean_record(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if not (isinstance(v, str) and v == "")}


def read_catalog(path: str | Path) -> list[CatalogEntry]:
    """Load catalog entries from a JSON array or a CSV file."""
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"catalog file not found: {path}")

    if path.suffix.lower() == ".json":
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CatalogLoadError(f"invalid JSON in {path}: {e}") from e
        if not isinstance(records, list):
            raise CatalogLoadError(f"catalog JSON must be an array: {path}")
    elif path.suffix.lower() == ".csv":
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.ParserError as e:
            raise CatalogLoadError(f"invalid CSV in {path}: {e}") from e
        records = [_clean_record(r) for r in df.to_dict(orient="records")]
    else:
        raise CatalogLoadError(f"unsupported catalog file type: {path.name}")

    entries: list[CatalogEntry] = []
    for i, record in enumerate(records):
        try:
            entries.append(CatalogEntry.model_validate(record))
        except ValidationError as e:
            raise CatalogLoadError(f"invalid catalog entry at row {i}: {e}") from e

    log.info("catalog_loaded", path=str(path), count=len(entries))
    return entries


def build_response(parsed: ParsedFile, outcomes: Sequence[ItemOutcome]) -> dict[str, Any]:
    """Payload handed to the presentation layer after a parse + match."""
    return {
        "fileName": parsed.file_name,
        "rowCount": parsed.row_count,
        "items": [item.to_dict() for item in parsed.items],
        "matchedItems": [o.to_dict() for o in outcomes],
        "stats": parsed.stats.to_dict(),
    }


def _outcome_row(outcome: ItemOutcome) -> dict[str, Any]:
    if not outcome.ok:
        return {"requested_name": None, "error": outcome.error}
    product = outcome.matched_product
    details = outcome.match_details
    return {
        "requested_name": outcome.requested_item.name,
        "quantity": outcome.quantity,
        "matched_id": product.id if product else None,
        "matched_name": product.name if product else None,
        "supplier": product.supplier if product else None,
        "unit_price": str(product.unit_price) if product else None,
        "confidence": outcome.confidence,
        "exact_terms": "|".join(details.exact_terms),
        "fuzzy_terms": "|".join(details.fuzzy_terms),
        "synonym_terms": "|".join(details.synonym_terms),
        "category_boost": details.category_boost,
        "error": None,
    }


def write_results(outcomes: Sequence[ItemOutcome], path: str | Path) -> None:
    """Write match outcomes to JSONL, CSV or XLSX."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".jsonl":
        with path.open("w", encoding="utf-8") as f:
            for o in outcomes:
                f.write(json.dumps(o.to_dict(), ensure_ascii=False) + "\n")
        return

    df = pd.DataFrame([_outcome_row(o) for o in outcomes])
    if suffix == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
