"""Tabular export of search results (xlsx and csv).

Sinks consume the dictionaries served by /api/search (the browser posts them
back unchanged), so every field is read defensively.
"""

import csv
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from utils.duration import bucket_label, format_duration

logger = logging.getLogger(__name__)

KST = timezone(timedelta(hours=9))

# (header, column width)
COLUMNS = [
    ("No.", 6),
    ("Channel", 25),
    ("Channel ID", 20),
    ("Title", 40),
    ("Category", 15),
    ("Upload Date", 12),
    ("Views", 12),
    ("Subscribers (10K)", 12),
    ("URL", 50),
    ("Duration (s)", 8),
    ("Duration", 10),
    ("Length", 12),
    ("Status", 10),
    ("Thumbnail URL", 50),
]

SHEET_TITLE = "YouTube Search Results"


@dataclass
class ExportFile:
    """A rendered export ready to send as an attachment."""

    content: bytes
    filename: str
    media_type: str


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def format_subscriber_count(count: Any) -> str:
    """Format a subscriber count in units of 10,000.

    Two decimals below 10k, one decimal below 100k, whole number above.
    """
    number = _to_int(count)
    if number <= 0:
        return "0"

    in_ten_thousands = number / 10000
    if number < 10000:
        return f"{in_ten_thousands:.2f}"
    if number < 100000:
        return f"{in_ten_thousands:.1f}"
    return str(round(in_ten_thousands))


def format_upload_date(value: Optional[str]) -> str:
    """Reduce an RFC 3339 timestamp to YYYY-MM-DD."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return value[:10]


def build_rows(search_results: List[dict]) -> List[list]:
    """Turn result dictionaries into spreadsheet rows (without header)."""
    rows = []
    for index, result in enumerate(search_results, start=1):
        duration_seconds = _to_int(result.get("duration_seconds"))
        rows.append([
            index,
            result.get("youtube_channel_name") or "",
            result.get("youtube_channel_id") or "",
            result.get("title") or "",
            result.get("primary_category") or "",
            format_upload_date(result.get("status_date")),
            f"{_to_int(result.get('daily_view_count')):,}",
            format_subscriber_count(result.get("subscriber_count")),
            result.get("vod_url") or "",
            duration_seconds,
            format_duration(duration_seconds),
            bucket_label(result.get("video_length_category") or ""),
            result.get("status") or "",
            result.get("thumbnail_url") or "",
        ])
    return rows


def build_export_filename(
    search_params: Optional[dict],
    result_count: int,
    extension: str,
    now: Optional[datetime] = None,
) -> str:
    """Build a descriptive export filename, timestamped in Korea Standard Time.

    Format: YouTube_<keyword>_<country><date-range>_[<count>]_<timestamp>.<ext>
    """
    params = search_params or {}
    moment = (now or datetime.now(timezone.utc)).astimezone(KST)
    timestamp = moment.strftime("%Y-%m-%dT%H-%M-%S")
    keyword = params.get("keyword") or "all"
    country = params.get("country") or "worldwide"

    date_range = ""
    start = (params.get("startDate") or "").replace("-", "")
    end = (params.get("endDate") or "").replace("-", "")
    if start and end:
        date_range = f"_{start}-{end}"
    elif start:
        date_range = f"_from{start}"
    elif end:
        date_range = f"_until{end}"
    elif params.get("uploadPeriod"):
        date_range = f"_{params['uploadPeriod']}"

    return f"YouTube_{keyword}_{country}{date_range}_[{result_count}]_{timestamp}.{extension}"


class TabularExportSink(ABC):
    """Writes search results to a downloadable tabular file."""

    media_type: str = "application/octet-stream"
    extension: str = "bin"

    @abstractmethod
    def render(self, rows: List[list]) -> bytes:
        """Render header + ``rows`` to file bytes."""

    def export(self, search_results: List[dict], search_params: Optional[dict] = None) -> ExportFile:
        """Render ``search_results`` and name the file after ``search_params``."""
        rows = build_rows(search_results)
        content = self.render(rows)
        filename = build_export_filename(search_params, len(search_results), self.extension)
        logger.info(f"Export created: {filename} ({len(rows)} rows)")
        return ExportFile(content=content, filename=filename, media_type=self.media_type)


class ExcelExportSink(TabularExportSink):
    """xlsx export via openpyxl."""

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    extension = "xlsx"

    def render(self, rows: List[list]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE

        sheet.append([header for header, _ in COLUMNS])
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for row in rows:
            sheet.append(row)

        for column_cells, (_, width) in zip(sheet.iter_cols(min_row=1, max_row=1), COLUMNS):
            sheet.column_dimensions[column_cells[0].column_letter].width = width

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


class CsvExportSink(TabularExportSink):
    """UTF-8 csv export (with BOM so spreadsheet apps detect the encoding)."""

    media_type = "text/csv"
    extension = "csv"

    def render(self, rows: List[list]) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow([header for header, _ in COLUMNS])
        writer.writerows(rows)
        return output.getvalue().encode("utf-8-sig")
