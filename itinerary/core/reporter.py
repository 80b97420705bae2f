import sys
from typing import Iterable, Optional, TextIO

from itinerary.core.schema import Diagnostic, Severity
from itinerary.core.config import config

RESET = "\u001B[0m"

# Estilo ANSI por severidade (mesmas cores do CLI antigo)
STYLES = {
    Severity.INFO: "\u001B[1m\u001B[35m\u001B[4m",
    Severity.WARNING: "\u001B[33m\u001B[3m\u001B[1m",
    Severity.ERROR: "\u001B[4m\u001B[1m\u001B[32m",
    Severity.FATAL: "\u001B[1m\u001B[31m",
}


def style(text: str, severity: Severity, color: Optional[bool] = None) -> str:
    if color is None:
        color = bool(config.ITINERARY_COLOR)
    if not color:
        return text
    return f"{STYLES[severity]}{text}{RESET}"


def report(
    diagnostics: Iterable[Diagnostic],
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    color: Optional[bool] = None
):
    """Imprime os diagnósticos: INFO no stdout, o resto no stderr."""
    out = out or sys.stdout
    err = err or sys.stderr
    for d in diagnostics:
        stream = out if d.severity == Severity.INFO else err
        print(style(d.message, d.severity, color), file=stream)
