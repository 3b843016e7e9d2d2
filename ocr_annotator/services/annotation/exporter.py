"""
Annotation Exporter

Export the annotations of a session as:
- CSV (one row per rectangle)
- JSON document with per-page annotation lists

Geometry is rounded to integers on export. Exporting never changes the
session.
"""
import csv
import io
import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ocr_annotator import config
from .geometry import round_half_up
from .models import AnnotationSession, Rectangle

EXPORT_VERSION = "1.0"

CSV_FIELDS_PAGE = ["rect_id", "x", "y", "width", "height", "text"]
CSV_FIELDS_ALL = ["page_index", "file_name"] + CSV_FIELDS_PAGE


class ExportFormat(str, Enum):
    """Supported export formats"""
    CSV = "csv"
    JSON = "json"


def rect_to_export_dict(rect: Rectangle) -> Dict[str, Any]:
    """Rectangle as exported: integer geometry, text always present"""
    return {
        "id": rect.id,
        "x": round_half_up(rect.x),
        "y": round_half_up(rect.y),
        "width": round_half_up(rect.w),
        "height": round_half_up(rect.h),
        "text": rect.text,
    }


class AnnotationExporter:
    """
    Export annotation sessions as CSV or JSON, in memory or to disk
    """

    def __init__(self, output_dir: Path = None):
        """
        Initialize exporter

        Args:
            output_dir: Output directory for exports (default: data/exports)
        """
        if output_dir is None:
            output_dir = config.EXPORT_DIR
        self.output_dir = Path(output_dir)

    @staticmethod
    def _selected_pages(session: AnnotationSession, all_pages: bool) -> List[tuple]:
        """(0-based index, page) pairs in scope"""
        if all_pages:
            return list(enumerate(session.pages))
        if session.current_page is None:
            return []
        return [(session.current_page_index, session.current_page)]

    def to_dict(
        self,
        session: AnnotationSession,
        all_pages: bool = True,
        exported_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Build the JSON export document

        Args:
            session: Session to export
            all_pages: Export every page, or only the current one
            exported_at: Timestamp to record (default: now)

        Returns:
            Dict with version, exported_at, and pages
        """
        exported_at = exported_at or datetime.now()
        return {
            "version": EXPORT_VERSION,
            "exported_at": exported_at.isoformat(),
            "pages": [
                {
                    "page_index": index + 1,
                    "file_name": page.name,
                    "annotations": [rect_to_export_dict(r) for r in page.rects],
                }
                for index, page in self._selected_pages(session, all_pages)
            ],
        }

    def to_json(
        self,
        session: AnnotationSession,
        all_pages: bool = True,
        indent: int = 2,
        exported_at: Optional[datetime] = None,
    ) -> str:
        """Serialize to JSON string"""
        data = self.to_dict(session, all_pages=all_pages, exported_at=exported_at)
        return json.dumps(data, indent=indent, ensure_ascii=False)

    def to_csv(self, session: AnnotationSession, all_pages: bool = True) -> str:
        """
        Serialize to CSV

        The all-pages variant prefixes each row with the 1-based page index
        and file name. String fields are always quoted, with embedded quotes
        doubled.
        """
        fieldnames = CSV_FIELDS_ALL if all_pages else CSV_FIELDS_PAGE
        buffer = io.StringIO()
        writer = csv.DictWriter(
            buffer,
            fieldnames=fieldnames,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\n",
        )
        # Header stays unquoted; only string values are
        buffer.write(",".join(fieldnames) + "\n")

        for index, page in self._selected_pages(session, all_pages):
            for rect in page.rects:
                row = rect_to_export_dict(rect)
                row["rect_id"] = str(row.pop("id"))
                if all_pages:
                    row["page_index"] = index + 1
                    row["file_name"] = page.name
                writer.writerow(row)

        return buffer.getvalue()

    def render(
        self,
        session: AnnotationSession,
        fmt: Union[ExportFormat, str] = ExportFormat.JSON,
        all_pages: bool = True,
    ) -> str:
        """Serialize a session in the given format"""
        fmt = ExportFormat(fmt)
        if fmt == ExportFormat.CSV:
            return self.to_csv(session, all_pages=all_pages)
        return self.to_json(session, all_pages=all_pages)

    def export_bytes(
        self,
        session: AnnotationSession,
        fmt: Union[ExportFormat, str] = ExportFormat.JSON,
        all_pages: bool = True,
    ) -> bytes:
        """
        Export in memory (for browser download)

        Returns:
            UTF-8 encoded export
        """
        return self.render(session, fmt, all_pages).encode("utf-8")

    def export(
        self,
        session: AnnotationSession,
        fmt: Union[ExportFormat, str] = ExportFormat.JSON,
        all_pages: bool = True,
        output_name: str = "annotations",
    ) -> Path:
        """
        Export to a file in the output directory

        Args:
            session: Session to export
            fmt: 'csv' or 'json'
            all_pages: Export every page, or only the current one
            output_name: File name without extension

        Returns:
            Path to exported file
        """
        fmt = ExportFormat(fmt)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        file_path = self.output_dir / self.file_name(fmt, output_name)
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(self.render(session, fmt, all_pages))

        return file_path

    @staticmethod
    def file_name(fmt: Union[ExportFormat, str], output_name: str = "annotations") -> str:
        return f"{output_name}.{ExportFormat(fmt).value}"

    @staticmethod
    def mime_type(fmt: Union[ExportFormat, str]) -> str:
        if ExportFormat(fmt) == ExportFormat.CSV:
            return "text/csv"
        return "application/json"
