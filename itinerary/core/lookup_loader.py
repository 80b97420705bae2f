import logging
import re
from typing import Iterable, List

from itinerary.core.schema import AirportLookup, AirportRecord, REQUIRED_COLUMNS
from itinerary.core.normalizer import trim
from itinerary.core.errors import (
    LookupDecodeError, LookupEmptyError, LookupNotFoundError, LookupSchemaError
)

logger = logging.getLogger(__name__)

# Separa por vírgula apenas quando ela está fora de aspas duplas
_FIELD_SPLIT = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')


def _drop_trailing_empty(fields: List[str]) -> List[str]:
    # Campos vazios no fim da linha não contam (",coordinates," tem 6 colunas)
    while fields and fields[-1] == "":
        fields.pop()
    return fields


def split_row(line: str) -> List[str]:
    return _drop_trailing_empty(_FIELD_SPLIT.split(line))


def _resolve_header(header: str) -> dict:
    columns = _drop_trailing_empty(header.split(","))
    problems = []

    if len(columns) != len(REQUIRED_COLUMNS):
        problems.append("Airport lookup malformed")

    indexes = {}
    for col in REQUIRED_COLUMNS:
        if col not in columns:
            problems.append(f"Airport lookup malformed: Missing '{col}' column")
        else:
            indexes[col] = columns.index(col)

    if problems:
        raise LookupSchemaError(problems, line=header)
    return indexes


def parse_airport_lookup(lines: Iterable[str], source: str = "<memory>") -> AirportLookup:
    """
    Constrói a AirportLookup a partir das linhas do CSV (cabeçalho incluso).

    Levanta LookupEmptyError se não houver cabeçalho e LookupSchemaError
    no primeiro problema estrutural (cabeçalho ou linha de dados).
    """
    it = iter(lines)
    header = next(it, None)
    if header is None:
        raise LookupEmptyError(source)

    indexes = _resolve_header(header.rstrip("\r\n"))

    records = []
    for raw in it:
        line = raw.rstrip("\r\n")
        fields = split_row(line)
        if len(fields) != len(REQUIRED_COLUMNS) or any(f == "" for f in fields):
            raise LookupSchemaError([f"Airport lookup malformed at line: {line}"], line=line)

        records.append(AirportRecord(**{col: trim(fields[idx]) for col, idx in indexes.items()}))

    lookup = AirportLookup.from_records(records)
    logger.debug("Loaded %d airports (%d keys) from %s", len(records), len(lookup), source)
    return lookup


def load_airport_lookup(path: str) -> AirportLookup:
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return parse_airport_lookup(f, source=path)
    except UnicodeDecodeError as e:
        raise LookupDecodeError(path) from e
    except OSError as e:
        raise LookupNotFoundError(path) from e
