import csv
import logging
from typing import Dict, List, TextIO, Tuple

logger = logging.getLogger(__name__)


def read_rows(source: TextIO) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Read a CSV export with a header row.

    Blank lines are skipped. Values are stripped of surrounding whitespace and
    quotes; cells missing from short rows come back as empty strings.

    Raises:
        ValueError: If the file is empty or has no header row
    """
    reader = csv.reader(source)

    header = None
    for row in reader:
        if any(cell.strip() for cell in row):
            header = [cell.strip() for cell in row]
            break

    if header is None:
        raise ValueError("Empty CSV file")

    logger.info(f"Found CSV header: {header}")

    rows = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        values = [cell.strip().strip('"') for cell in row]
        values += [""] * (len(header) - len(values))
        rows.append(dict(zip(header, values)))

    logger.info(f"Read {len(rows)} data rows")
    return header, rows
