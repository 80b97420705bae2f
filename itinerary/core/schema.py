from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field

REQUIRED_COLUMNS = ("name", "municipality", "icao_code", "iata_code", "iso_country", "coordinates")

CITY_PREFIX = "*"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class Diagnostic(BaseModel):
    """
    Mensagem estruturada devolvida pela lógica para a camada de apresentação.
    Quem decide cor, stream e exit code é o chamador (run.py / streamlit).
    """
    message: str
    severity: Severity = Severity.INFO
    stage: Optional[str] = Field(None, description="Etapa do pipeline que gerou a mensagem")


class AirportRecord(BaseModel):
    """Uma linha válida da tabela de aeroportos, com os campos já aparados."""
    model_config = ConfigDict(frozen=True)

    name: str
    municipality: str
    icao_code: str
    iata_code: str
    iso_country: str
    coordinates: str


class AirportLookup:
    """
    Tabela código -> nome de exibição.

    Para cada aeroporto existem 4 chaves: IATA e ICAO (-> nome do aeroporto)
    e "*IATA" / "*ICAO" (-> município). Depois de construída é somente leitura.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None, records: Optional[List[AirportRecord]] = None):
        self._entries = MappingProxyType(dict(entries or {}))
        self.records = tuple(records or ())

    @classmethod
    def from_records(cls, records: List[AirportRecord]) -> "AirportLookup":
        entries: Dict[str, str] = {}
        for r in records:
            entries[r.iata_code] = r.name
            entries[r.icao_code] = r.name
            entries[CITY_PREFIX + r.iata_code] = r.municipality
            entries[CITY_PREFIX + r.icao_code] = r.municipality
        return cls(entries, records)

    @property
    def entries(self) -> Mapping[str, str]:
        return self._entries

    def airport_name(self, code: str) -> Optional[str]:
        return self._entries.get(code)

    def municipality(self, code: str) -> Optional[str]:
        return self._entries.get(CITY_PREFIX + code)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AirportLookup(airports={len(self.records)}, entries={len(self._entries)})"


class PrettifyResult(BaseModel):
    """Objeto final consolidado do pipeline para consumo no CLI/UI"""
    request_id: str
    lines_read: int = 0
    lines_written: int = 0
    output_text: Optional[str] = None
    diagnostics: List[Diagnostic] = []
    exit_code: int = 0
    trace_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def add(self, message: str, severity: Severity = Severity.INFO, stage: Optional[str] = None) -> Diagnostic:
        diag = Diagnostic(message=message, severity=severity, stage=stage)
        self.diagnostics.append(diag)
        return diag
