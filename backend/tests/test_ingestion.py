"""
Test Module for CSV Client Ingestion.

Validates:
- Spanish header mapping onto ClientCreate fields
- BOM tolerance, blank line skipping and cell trimming
- closed parsing ("1" / "true", case-insensitive)
- Meeting dates parsed to UTC, invalid dates reported by 1-based row
- Missing columns, empty files and invalid rows raise CsvIngestionError
"""

from datetime import datetime, timezone

import pytest

from backend.core.errors import CsvIngestionError
from backend.services.ingestion import CSV_COLUMN_MAP, parse_closed, parse_clients_csv


HEADER = 'Nombre,Correo Electronico,Numero de Telefono,Fecha de la Reunion,Vendedor asignado,closed,Transcripcion'


def _csv(*rows: str) -> str:
    return '\n'.join([HEADER, *rows]) + '\n'


VALID_ROW = 'Ana Torres,ana@example.com,+56 9 1234,2024-03-14,Carlos,1,"We get 150 questions, every week."'


class TestParseClosed:

    @pytest.mark.parametrize('value,expected', [
        ('1', True), ('true', True), (' TRUE ', True),
        ('0', False), ('false', False), ('yes', False), ('', False),
    ])
    def test_values(self, value, expected):
        assert parse_closed(value) is expected


class TestParseClientsCsv:

    def test_header_mapping(self):
        assert set(CSV_COLUMN_MAP.values()) == {
            'name', 'email', 'phone', 'meetingDate', 'assignedSeller', 'closed', 'transcription',
        }

    def test_valid_row(self):
        clients = parse_clients_csv(_csv(VALID_ROW))

        assert len(clients) == 1
        client = clients[0]
        assert client.name == 'Ana Torres'
        assert client.email == 'ana@example.com'
        assert client.assignedSeller == 'Carlos'
        assert client.closed is True
        assert client.transcription == 'We get 150 questions, every week.'
        assert client.meetingDate == datetime(2024, 3, 14, tzinfo=timezone.utc)

    def test_bytes_with_bom_and_trimming(self):
        content = ('\ufeff' + _csv(
            '  Luis Perez , luis@example.com ,, 2024-03-15T10:30:00-03:00 , Maria ,false, Hola ',
            '',
        )).encode('utf-8')

        clients = parse_clients_csv(content)

        assert len(clients) == 1
        assert clients[0].name == 'Luis Perez'
        assert clients[0].phone == ''
        assert clients[0].closed is False
        assert clients[0].meetingDate == datetime(2024, 3, 15, 13, 30, tzinfo=timezone.utc)

    def test_rows_keep_file_order(self):
        second = VALID_ROW.replace('ana@example.com', 'bea@example.com').replace('Ana Torres', 'Bea Ruiz')

        clients = parse_clients_csv(_csv(VALID_ROW, second))

        assert [client.name for client in clients] == ['Ana Torres', 'Bea Ruiz']

    def test_missing_columns_named(self):
        content = 'Nombre,Correo Electronico\nAna,ana@example.com\n'

        with pytest.raises(CsvIngestionError) as exc_info:
            parse_clients_csv(content)

        message = str(exc_info.value)
        assert 'Fecha de la Reunion' in message
        assert 'Transcripcion' in message
        assert 'Nombre,' not in message

    def test_empty_file(self):
        with pytest.raises(CsvIngestionError):
            parse_clients_csv(b'')

    def test_header_only(self):
        with pytest.raises(CsvIngestionError, match='no data rows'):
            parse_clients_csv(_csv())

    def test_invalid_dates_list_rows(self):
        bad = VALID_ROW.replace('2024-03-14', 'not a date')

        with pytest.raises(CsvIngestionError) as exc_info:
            parse_clients_csv(_csv(VALID_ROW, bad, bad))

        assert exc_info.value.rows == [2, 3]

    def test_blank_required_field(self):
        missing_name = VALID_ROW.replace('Ana Torres', '')

        with pytest.raises(CsvIngestionError) as exc_info:
            parse_clients_csv(_csv(VALID_ROW, missing_name))

        assert exc_info.value.rows == [2]
