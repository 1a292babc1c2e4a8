import logging
from pathlib import Path
from typing import List, Optional

import ingestion.delimited as delimited
import ingestion.excel as excel
from categorization import detect_columns
from config import Config
from ingestion.mapping import rows_to_transactions
from models.transaction import Transaction

logger = logging.getLogger(__name__)

_READERS = {
    ".csv": delimited,
    ".xlsx": excel,
}


def get_reader(path: Path):
    """Get the reader module for a file, chosen by extension."""
    suffix = Path(path).suffix.lower()
    if suffix not in _READERS:
        raise ValueError(f"Unsupported file format: {suffix or path}")
    return _READERS[suffix]


def get_supported_extensions():
    """Get list of importable file extensions."""
    return list(_READERS.keys())


def ingest_file(path: Path, config: Optional[Config] = None) -> List[Transaction]:
    """Read a CSV or Excel export and return uncategorized transactions.

    Raises:
        ValueError: If the format is unsupported, the file is empty, or no
                    date/description/amount columns could be identified
    """
    path = Path(path)
    reader = get_reader(path)

    if reader is delimited:
        with open(path, "r", newline="", encoding="utf-8-sig") as f:
            headers, rows = reader.read_rows(f)
    else:
        headers, rows = reader.read_rows(path)

    mapping = detect_columns(headers, config)
    if not (mapping.description and mapping.has_amount):
        raise ValueError(
            f"Could not find description and amount columns in headers: {headers}"
        )
    if mapping.amount:
        amount_columns = f"amount='{mapping.amount}'"
    else:
        amount_columns = f"debit='{mapping.debit}', credit='{mapping.credit}'"
    logger.info(
        f"Using columns date='{mapping.date}', description='{mapping.description}', "
        f"{amount_columns} ({mapping.source})"
    )

    return rows_to_transactions(rows, mapping)
