"""Export of the currently rendered listing page."""

import io
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from roster.columns import TableColumn
from roster.config import config
from roster.config.logging_config import get_logger

logger = get_logger("export")

MISSING = "-"


def resolve_path(row: Dict[str, Any], path: str) -> Any:
    """
    Look up a dotted key such as ``department.faculty_name``.

    Returns:
        The nested value, or None if any step is missing or not a mapping.
    """
    current: Any = row
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _cell(value: Any) -> Any:
    if value is None or value == "":
        return MISSING
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v not in (None, "")]
        return "; ".join(items) if items else MISSING
    return value


def rows_to_frame(rows: Sequence[Dict[str, Any]], columns: Sequence[TableColumn]) -> pd.DataFrame:
    """
    Build the export table: one column per data column, headed by its label.

    Args:
        rows: Employee records as returned by the listing endpoint.
        columns: Rendered columns; action columns are skipped.

    Returns:
        DataFrame with ``-`` in place of missing cells.
    """
    data_columns = [col for col in columns if not col.is_action]
    records = [
        {col.label: _cell(resolve_path(row, col.key)) for col in data_columns}
        for row in rows
    ]
    return pd.DataFrame(records, columns=[col.label for col in data_columns])


def export_filename(extension: str = "csv", on: Optional[date] = None) -> str:
    """File name of the form ``employees_<YYYY-MM-DD>.<extension>``."""
    day = on or datetime.now().date()
    return f"employees_{day.isoformat()}.{extension}"


class ListingExporter:
    """Write the rendered page to CSV or Excel."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir or config.app.exports_path)

    def export_csv(
        self,
        rows: Sequence[Dict[str, Any]],
        columns: Sequence[TableColumn],
        filename: Optional[str] = None,
    ) -> Path:
        """
        Export to a CSV file.

        Returns:
            Path to exported file.
        """
        df = rows_to_frame(rows, columns)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / (filename or export_filename("csv"))
        df.to_csv(filepath, index=False, encoding="utf-8")
        logger.info(f"Exported {len(df)} employees to {filepath}")
        return filepath

    def export_csv_buffer(
        self, rows: Sequence[Dict[str, Any]], columns: Sequence[TableColumn]
    ) -> io.StringIO:
        """CSV in an in-memory buffer (for Streamlit download)."""
        buffer = io.StringIO()
        rows_to_frame(rows, columns).to_csv(buffer, index=False)
        buffer.seek(0)
        return buffer

    def export_excel_buffer(
        self, rows: Sequence[Dict[str, Any]], columns: Sequence[TableColumn]
    ) -> io.BytesIO:
        """Excel workbook in an in-memory buffer, header row styled and frozen."""
        df = rows_to_frame(rows, columns)
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Employees", index=False)
            self._format_sheet(writer.sheets["Employees"])
        buffer.seek(0)
        return buffer

    def _format_sheet(self, worksheet) -> None:
        from openpyxl.styles import Alignment, Font, PatternFill

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        for cell in worksheet[1]:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        worksheet.freeze_panes = "A2"
        worksheet.auto_filter.ref = worksheet.dimensions
