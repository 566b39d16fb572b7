# app/services/excel.py
from typing import Any, Dict, List, Optional
import logging

from app.exceptions import ConfigError, NotFoundError

logger = logging.getLogger(__name__)


def rows_to_records(values: Optional[List[List[Any]]]) -> List[Dict[str, Any]]:
    """Turn a used-range value grid into one record per data row.

    Row 0 is the header row. Cells are mapped to headers by position and
    missing trailing cells become None. Non-string headers (numbers, dates
    stored as serials) are keyed by their string form.
    """
    if not values:
        return []

    headers, *rows = values
    return [
        {str(header): row[index] if index < len(row) else None
         for index, header in enumerate(headers)}
        for row in rows
    ]


class ExcelService:
    def __init__(self, graph_client, site_id: str = "root",
                 drive_id: Optional[str] = None, file_id: Optional[str] = None):
        self.graph_client = graph_client
        self.site_id = site_id or "root"
        self.drive_id = drive_id
        self.file_id = file_id

    @property
    def item_path(self) -> str:
        if not self.drive_id or not self.file_id:
            raise ConfigError("EXCEL_DRIVE_ID and EXCEL_FILE_ID must be configured")
        return f"/sites/{self.site_id}/drives/{self.drive_id}/items/{self.file_id}"

    def get_used_range(self) -> List[List[Any]]:
        """Fetch the used range values of the workbook's first worksheet."""
        item_path = self.item_path

        # Access check only; the drive item body is not needed
        logger.info("Fetching drive item...")
        self.graph_client.get(item_path)

        logger.info("Fetching worksheets...")
        worksheets = self.graph_client.get(f"{item_path}/workbook/worksheets").get("value") or []
        if not worksheets:
            raise NotFoundError("No worksheets found in workbook")

        worksheet_id = worksheets[0]["id"]
        logger.info(f"First worksheet ID: {worksheet_id}")

        logger.info("Fetching worksheet data...")
        used_range = self.graph_client.get(
            f"{item_path}/workbook/worksheets/{worksheet_id}/usedRange"
        )
        return used_range.get("values") or []

    def get_records(self) -> List[Dict[str, Any]]:
        return rows_to_records(self.get_used_range())
