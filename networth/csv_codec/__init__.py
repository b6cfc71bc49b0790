"""CSV import/export package."""

from networth.csv_codec.codec import (
    COLUMN_COUNT,
    CSV_HEADER,
    EXPORT_TEMPLATE,
    ImportFailure,
    ParsedRecords,
    ParseError,
    asset_from_row,
    export_records,
    liability_from_row,
    parse_records,
)
from networth.csv_codec.tokenizer import split_csv_line, split_csv_lines

__all__ = [
    "COLUMN_COUNT",
    "CSV_HEADER",
    "EXPORT_TEMPLATE",
    "ImportFailure",
    "ParsedRecords",
    "ParseError",
    "asset_from_row",
    "export_records",
    "liability_from_row",
    "parse_records",
    "split_csv_line",
    "split_csv_lines",
]
