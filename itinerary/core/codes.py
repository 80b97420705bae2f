import re
from typing import Iterator

from itinerary.core.schema import AirportLookup, CITY_PREFIX

IATA_TOKEN = re.compile(r"(#[A-Z]{3}|\*#[A-Z]{3})", re.IGNORECASE)
ICAO_TOKEN = re.compile(r"(##[A-Z]{4}|\*##[A-Z]{4})", re.IGNORECASE)


def _tokens(pattern: re.Pattern, text: str) -> Iterator[str]:
    for m in pattern.finditer(text):
        yield m.group(0)


def resolve_token(token: str, lookup: AirportLookup):
    """
    Devolve o valor de exibição para um token (#LHR, *#LHR, ##EGLL, *##EGLL)
    ou None se o código não estiver na tabela.
    """
    code = token.replace("#", "").replace(CITY_PREFIX, "").upper()
    if code not in lookup:
        return None
    if token.startswith(CITY_PREFIX):
        return lookup.get(CITY_PREFIX + code)
    return lookup.get(code)


def substitute_codes(line: str, lookup: AirportLookup) -> str:
    """
    Troca os tokens de aeroporto pelo nome (ou município, com '*').

    Os tokens IATA e ICAO são procurados na linha original; cada token
    conhecido substitui todas as ocorrências literais do mesmo texto na linha
    corrente. IATA antes de ICAO. Códigos desconhecidos ficam como estão.
    """
    original = line
    for pattern in (IATA_TOKEN, ICAO_TOKEN):
        for token in _tokens(pattern, original):
            value = resolve_token(token, lookup)
            if value is not None:
                line = line.replace(token, value)
    return line
