from typing import List, Optional
import gspread
from ...domain.ports import LedgerBackendPort
from ...infrastructure.config import ConfigError, settings

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsLedgerBackend(LedgerBackendPort):
    """First worksheet of the ledger spreadsheet, accessed with a service account."""

    def __init__(self, worksheet: gspread.Worksheet) -> None:
        self._ws = worksheet

    @classmethod
    def open(cls, creds_file: str = settings.creds_file, spreadsheet_id: str = settings.spreadsheet_id, worksheet: Optional[str] = None) -> "SheetsLedgerBackend":
        try:
            client = gspread.service_account(filename=creds_file, scopes=SCOPES)
            spreadsheet = client.open_by_key(spreadsheet_id)
            ws = spreadsheet.worksheet(worksheet) if worksheet else spreadsheet.sheet1
        except Exception as e:
            raise ConfigError(f"cannot open spreadsheet {spreadsheet_id}: {e}") from e
        print(f"[sheets] Opened {spreadsheet_id} / {ws.title}")
        return cls(ws)

    def read_range(self, a1_range: str) -> List[List[str]]:
        values = self._ws.get(a1_range)
        return [[str(cell) for cell in row] for row in values]

    def append_row(self, values: List[str]) -> str:
        resp = self._ws.append_row(values, value_input_option="RAW", table_range="A2")
        return resp["updates"]["updatedRange"]

    def update_cell(self, a1_cell: str, value: str) -> None:
        self._ws.update(values=[[value]], range_name=a1_cell, raw=True)
