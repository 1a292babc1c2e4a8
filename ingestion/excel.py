import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from openpyxl import load_workbook

logger = logging.getLogger(__name__)


def read_rows(path: Path) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Read the first worksheet of an .xlsx workbook.

    The first non-empty row is the header. Cells keep their native types, so
    dates arrive as datetime objects and amounts as numbers.

    Raises:
        ValueError: If the worksheet has no header row
    """
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows_iter = sheet.iter_rows(values_only=True)

        header = None
        for values in rows_iter:
            if any(v is not None and str(v).strip() for v in values):
                header = [str(v).strip() if v is not None else "" for v in values]
                break

        if header is None:
            raise ValueError("Empty worksheet")

        logger.info(f"Found worksheet '{sheet.title}' header: {header}")

        rows = []
        for values in rows_iter:
            if all(v is None or str(v).strip() == "" for v in values):
                continue
            row = {}
            for name, value in zip(header, values):
                if name:
                    row[name] = value.strip() if isinstance(value, str) else value
            rows.append(row)
    finally:
        workbook.close()

    logger.info(f"Read {len(rows)} data rows")
    return header, rows
