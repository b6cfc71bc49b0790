"""
CSV Import / Export

One fixed 11-column schema shared by assets and liabilities:

    Type,Name,Category,Purchase Date,Purchase Price,Current Value,
    Original Amount,Current Balance,Interest Rate,Start Date,Notes

Asset rows leave the liability columns empty and vice versa.

IMPORT POLICY (partial success):
- The first non-blank line is the header and is discarded
- Rows with fewer than 11 fields are skipped
- Rows whose Type is neither "Asset" nor "Liability" are skipped
- Rows with a missing required field, a non-numeric amount, an unknown
  category or an unparseable date are skipped
- Skipped rows are counted, never raised to the caller
- Empty content imports nothing and is not an error
- Only unreadable content aborts the whole import (ImportFailure)

Imported records always get fresh ids and never carry links; links are
not part of the CSV schema.
"""

import csv
import io
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from networth.csv_codec.tokenizer import split_csv_line, split_csv_lines
from networth.models.records import Asset, Liability


logger = structlog.get_logger(__name__)


CSV_HEADER = [
    "Type",
    "Name",
    "Category",
    "Purchase Date",
    "Purchase Price",
    "Current Value",
    "Original Amount",
    "Current Balance",
    "Interest Rate",
    "Start Date",
    "Notes",
]

COLUMN_COUNT = len(CSV_HEADER)

# Column positions
TYPE, NAME, CATEGORY = 0, 1, 2
PURCHASE_DATE, PURCHASE_PRICE, CURRENT_VALUE = 3, 4, 5
ORIGINAL_AMOUNT, CURRENT_BALANCE, INTEREST_RATE, START_DATE = 6, 7, 8, 9
NOTES = 10

ASSET_TYPE = "Asset"
LIABILITY_TYPE = "Liability"

EXPORT_TEMPLATE = (
    "Type,Name,Category,Purchase Date,Purchase Price,Current Value,"
    "Original Amount,Current Balance,Interest Rate,Start Date,Notes\n"
    "Asset,Example Home,Real Estate,2020-01-01,300000,350000,,,,,My primary residence\n"
    "Asset,Example Car,Vehicle,2021-06-15,25000,18000,,,,,2021 Honda Accord\n"
    "Asset,Savings Account,Bank Account,2019-01-01,0,15000,,,,,Emergency fund\n"
    "Liability,Home Mortgage,Mortgage,,,,250000,240000,3.5,2020-01-01,30-year fixed\n"
    "Liability,Car Loan,Auto Loan,,,,25000,12000,4.5,2021-06-15,60-month term"
)


class ParseError(ValueError):
    """A single CSV row could not be turned into a record."""
    pass


class ImportFailure(Exception):
    """The CSV content as a whole could not be read. Nothing was imported."""
    pass


class ParsedRecords(BaseModel):
    """Records recovered from a CSV document, not yet added to any store."""

    assets: list[Asset] = Field(default_factory=list)
    liabilities: list[Liability] = Field(default_factory=list)
    rows_skipped: int = 0


# =============================================================================
# EXPORT
# =============================================================================

def _text(value: Union[str, None]) -> str:
    # The importer is line-based, so free text must stay on one line
    if not value:
        return ""
    return " ".join(value.splitlines())


def _number(value: Decimal) -> str:
    return format(value, "f")


def asset_to_row(asset: Asset) -> list[str]:
    return [
        ASSET_TYPE,
        _text(asset.name),
        asset.category.value,
        asset.purchase_date.isoformat(),
        _number(asset.purchase_price),
        _number(asset.current_value),
        "",
        "",
        "",
        "",
        _text(asset.notes),
    ]


def liability_to_row(liability: Liability) -> list[str]:
    return [
        LIABILITY_TYPE,
        _text(liability.name),
        liability.category.value,
        "",
        "",
        "",
        _number(liability.original_amount),
        _number(liability.current_balance),
        _number(liability.interest_rate),
        liability.start_date.isoformat(),
        _text(liability.notes),
    ]


def export_records(
    assets: Iterable[Asset],
    liabilities: Iterable[Liability],
) -> str:
    """
    Serialize records to CSV text: header, then assets, then liabilities.

    Fields containing a comma or a quote are quoted, with embedded quotes
    doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADER)
    for asset in assets:
        writer.writerow(asset_to_row(asset))
    for liability in liabilities:
        writer.writerow(liability_to_row(liability))
    return buffer.getvalue()


# =============================================================================
# IMPORT
# =============================================================================

def _required(fields: list[str], index: int) -> str:
    value = fields[index]
    if not value:
        raise ParseError(f"{CSV_HEADER[index]} is required")
    return value


def _parse_amount(fields: list[str], index: int) -> Decimal:
    raw = _required(fields, index)
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ParseError(f"{CSV_HEADER[index]} is not a number: {raw!r}") from e
    if not value.is_finite():
        raise ParseError(f"{CSV_HEADER[index]} is not a finite number: {raw!r}")
    return value


def _parse_rate(fields: list[str]) -> Decimal:
    """Interest rate is optional; anything unreadable counts as 0."""
    try:
        return _parse_amount(fields, INTEREST_RATE)
    except ParseError:
        return Decimal("0")


def _parse_date(fields: list[str], index: int) -> date:
    raw = _required(fields, index)
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ParseError(f"{CSV_HEADER[index]} is not a YYYY-MM-DD date: {raw!r}") from e


def asset_from_row(fields: list[str]) -> Asset:
    """
    Build a fresh Asset from a tokenized row.

    Raises:
        ParseError: If a required field is missing or invalid
    """
    try:
        return Asset(
            name=_required(fields, NAME),
            category=_required(fields, CATEGORY),
            purchase_date=_parse_date(fields, PURCHASE_DATE),
            purchase_price=_parse_amount(fields, PURCHASE_PRICE),
            current_value=_parse_amount(fields, CURRENT_VALUE),
            notes=fields[NOTES] or None,
        )
    except PydanticValidationError as e:
        raise ParseError(str(e)) from e


def liability_from_row(fields: list[str]) -> Liability:
    """
    Build a fresh Liability from a tokenized row.

    Raises:
        ParseError: If a required field is missing or invalid
    """
    try:
        return Liability(
            name=_required(fields, NAME),
            category=_required(fields, CATEGORY),
            original_amount=_parse_amount(fields, ORIGINAL_AMOUNT),
            current_balance=_parse_amount(fields, CURRENT_BALANCE),
            interest_rate=_parse_rate(fields),
            start_date=_parse_date(fields, START_DATE),
            notes=fields[NOTES] or None,
        )
    except PydanticValidationError as e:
        raise ParseError(str(e)) from e


def decode_content(content: Union[str, bytes]) -> str:
    """
    Turn uploaded file content into text.

    Raises:
        ImportFailure: If the bytes are not UTF-8 text
    """
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFailure(f"File is not UTF-8 text: {e}") from e
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    raise ImportFailure(f"Unsupported content type: {type(content).__name__}")


def parse_records(content: Union[str, bytes]) -> ParsedRecords:
    """
    Parse a CSV document into new records.

    Returns:
        ParsedRecords with every accepted record and a count of skipped rows

    Raises:
        ImportFailure: If the content is not readable text
    """
    text = decode_content(content)
    lines = split_csv_lines(text)

    # An empty file is a successful import of nothing
    parsed = ParsedRecords()
    for line_no, line in enumerate(lines[1:], start=2):
        fields = split_csv_line(line)
        if len(fields) < COLUMN_COUNT:
            parsed.rows_skipped += 1
            continue

        row_type = fields[TYPE]
        try:
            if row_type == ASSET_TYPE:
                parsed.assets.append(asset_from_row(fields))
            elif row_type == LIABILITY_TYPE:
                parsed.liabilities.append(liability_from_row(fields))
            else:
                parsed.rows_skipped += 1
        except ParseError as e:
            logger.debug("csv_row_skipped", line=line_no, reason=str(e))
            parsed.rows_skipped += 1

    return parsed
