"""
CSV ingestion for client meeting exports.

The dashboard's CSV export uses Spanish column headers; this module maps them
onto ClientCreate payloads that ClientsService.create_many_clients inserts.

Column mapping:
    Nombre               -> name
    Correo Electronico   -> email
    Numero de Telefono   -> phone
    Fecha de la Reunion  -> meetingDate (parsed to UTC)
    Vendedor asignado    -> assignedSeller
    closed               -> closed ("1" or "true", case-insensitive)
    Transcripcion        -> transcription

Validation:
- Every mapped column must be present
- The file must contain at least one data row
- Every meeting date must parse; failures list the 1-based data row numbers
- Every row must satisfy ClientCreate (non-blank name, email, seller, transcription)

Any violation raises CsvIngestionError, which the upload endpoint turns
into a 400 response. Nothing is inserted unless the whole file is valid.
"""

import io
import logging
from typing import Dict, List, Union

import pandas as pd
from pydantic import ValidationError

from backend.core.errors import CsvIngestionError
from backend.models import ClientCreate

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Column Mapping
# =============================================================================

CSV_COLUMN_MAP: Dict[str, str] = {
    'Nombre': 'name',
    'Correo Electronico': 'email',
    'Numero de Telefono': 'phone',
    'Fecha de la Reunion': 'meetingDate',
    'Vendedor asignado': 'assignedSeller',
    'closed': 'closed',
    'Transcripcion': 'transcription',
}

CLOSED_TRUE_VALUES = {'1', 'true'}


def parse_closed(value: str) -> bool:
    return (value or '').strip().lower() in CLOSED_TRUE_VALUES


def _read_dataframe(content: Union[bytes, str]) -> pd.DataFrame:
    """Read the CSV with every cell as a trimmed string, blanks as ''."""
    if isinstance(content, bytes):
        file_like = io.StringIO(content.decode('utf-8-sig'))
    else:
        file_like = io.StringIO(content.lstrip('\ufeff'))

    try:
        df = pd.read_csv(
            file_like,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        raise CsvIngestionError('CSV file is empty')
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CsvIngestionError(f'Failed to parse CSV file: {str(e)}')

    df.columns = df.columns.str.strip()
    for column in df.columns:
        df[column] = df[column].str.strip()
    return df


def validate_columns(df: pd.DataFrame) -> None:
    """
    Raises:
        CsvIngestionError: Naming every missing required column.
    """
    missing = [column for column in CSV_COLUMN_MAP if column not in df.columns]
    if missing:
        raise CsvIngestionError(f"Missing required columns: {', '.join(missing)}")


def parse_meeting_dates(values: pd.Series) -> pd.Series:
    """
    Parse meeting dates to UTC timestamps.

    Raises:
        CsvIngestionError: Listing the 1-based data rows whose date is invalid.
    """
    parsed = pd.to_datetime(values, utc=True, errors='coerce', format='mixed')
    invalid = [int(index) + 1 for index in parsed[parsed.isna()].index]
    if invalid:
        raise CsvIngestionError(
            f"Invalid meeting date in rows: {', '.join(str(row) for row in invalid)}",
            rows=invalid,
        )
    return parsed


def parse_clients_csv(content: Union[bytes, str]) -> List[ClientCreate]:
    """
    Parse an uploaded CSV export into client payloads.

    Args:
        content: Raw file content (bytes are decoded as UTF-8, BOM tolerated).

    Returns:
        List of ClientCreate, one per data row, in file order.

    Raises:
        CsvIngestionError: If the file is unreadable, empty, missing columns,
            or holds an invalid row.
    """
    df = _read_dataframe(content)
    validate_columns(df)

    if df.empty:
        raise CsvIngestionError('CSV file contains no data rows')

    df = df.reset_index(drop=True)
    meeting_dates = parse_meeting_dates(df['Fecha de la Reunion'])

    clients: List[ClientCreate] = []
    invalid_rows: List[int] = []
    for index, row in df.iterrows():
        try:
            clients.append(ClientCreate(
                name=row['Nombre'],
                email=row['Correo Electronico'],
                phone=row['Numero de Telefono'],
                assignedSeller=row['Vendedor asignado'],
                meetingDate=meeting_dates[index].to_pydatetime(),
                closed=parse_closed(row['closed']),
                transcription=row['Transcripcion'],
            ))
        except ValidationError:
            invalid_rows.append(int(index) + 1)

    if invalid_rows:
        raise CsvIngestionError(
            f"Invalid client data in rows: {', '.join(str(row) for row in invalid_rows)}",
            rows=invalid_rows,
        )

    logger.info(f"Parsed CSV with {len(clients)} client rows")
    return clients
