import logging
import re
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from itinerary.core.schema import Diagnostic, Severity

logger = logging.getLogger(__name__)

DATE_TOKEN = re.compile(r"(D|T12|T24)\(([^)]+)\)")
PAYLOAD_SHAPE = re.compile(r".*(Z|[+-]\d{2}:\d{2})?")

# Sufixo opcional "[Europe/Paris]", aceito pelo ISO_DATE_TIME
_REGION_SUFFIX = re.compile(r"^(?P<stamp>.*?)\[(?P<region>[^\]]+)\]$")

# Formato estendido exigido pelo ISO_DATE_TIME: data e hora com separadores,
# segundos e fração opcionais, offset com dois-pontos
ISO_EXTENDED = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{1,9})?)?(Z|[+-]\d{2}:\d{2})?",
    re.ASCII,
)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_iso_datetime(payload: str) -> Optional[datetime]:
    """
    Converte um payload ISO-8601 em datetime. O offset é opcional; 'Z' vale
    UTC e um id de região entre colchetes define o fuso (ZoneInfo).
    Retorna None quando o payload não é uma data-hora válida.
    """
    region = None
    m = _REGION_SUFFIX.match(payload)
    if m:
        payload = m.group("stamp")
        region = m.group("region")

    if not ISO_EXTENDED.fullmatch(payload):
        return None

    # Mesmo tratamento usado nos adapters: 'Z' -> '+00:00'
    stamp = payload.replace("Z", "+00:00")
    try:
        dt = datetime.fromisoformat(stamp)
    except ValueError:
        return None

    if region:
        try:
            tz = ZoneInfo(region)
        except (ZoneInfoNotFoundError, ValueError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=tz)
        else:
            dt = dt.astimezone(tz)
    return dt


def zone_label(dt: datetime) -> Optional[str]:
    """Abreviação do fuso: 'CET' para regiões, 'Z' para UTC, '+02:00' para offsets."""
    if dt.tzinfo is None:
        return None
    if isinstance(dt.tzinfo, ZoneInfo):
        return dt.tzname()

    offset = dt.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return "Z"
    sign = "+" if offset > timedelta(0) else "-"
    total = abs(int(offset.total_seconds()))
    hours, rest = divmod(total, 3600)
    return f"{sign}{hours:02d}:{rest // 60:02d}"


def format_date(dt: datetime) -> str:
    return f"{dt.day:02d} {MONTH_ABBR[dt.month - 1]} {dt.year:04d}"


def format_time_12h(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour:02d}:{dt.minute:02d}{suffix}"


def format_time_24h(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def _with_zone(text: str, dt: datetime, payload: str) -> str:
    # Qualquer '+' ou '-' no payload conta como "tem fuso", inclusive os da data
    if "+" in payload or "-" in payload:
        label = zone_label(dt)
        if label:
            return f"{text} ({label})"
    return text


def format_token(kind: str, payload: str, dt: datetime) -> Optional[str]:
    if kind == "D":
        return format_date(dt)
    if kind == "T12":
        return _with_zone(format_time_12h(dt), dt, payload)
    if kind == "T24":
        return _with_zone(format_time_24h(dt), dt, payload)
    return None


def format_dates_and_times(line: str) -> Tuple[str, List[Diagnostic]]:
    """
    Reescreve os tokens D(...), T12(...) e T24(...) da linha.

    Payload com formato inválido gera um aviso; payload que não é data-hora
    é ignorado em silêncio. No fim, todo 'Z' restante vira '+00:00'.
    """
    diagnostics: List[Diagnostic] = []
    original = line

    for m in DATE_TOKEN.finditer(original):
        kind, payload = m.group(1), m.group(2)

        if not PAYLOAD_SHAPE.fullmatch(payload):
            diagnostics.append(Diagnostic(
                message=f"Malformed datetime: {payload}",
                severity=Severity.WARNING,
                stage="format_dates",
            ))
            continue

        dt = parse_iso_datetime(payload)
        if dt is None:
            logger.debug("Skipping unparseable datetime %r", payload)
            continue

        formatted = format_token(kind, payload, dt)
        if formatted is None:
            continue
        line = line.replace(m.group(0), formatted)

    return line.replace("Z", "+00:00"), diagnostics
