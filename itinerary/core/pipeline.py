import io
import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from itinerary.core.schema import AirportLookup, Diagnostic, PrettifyResult, Severity
from itinerary.core.errors import (
    PrettifierError, LookupSchemaError, InputNotFoundError, InputDecodeError,
    OutputWriteError, TraceWriteError
)
from itinerary.core.lookup_loader import load_airport_lookup
from itinerary.core.normalizer import normalize_whitespace, trim
from itinerary.core.codes import substitute_codes
from itinerary.core.dates import format_dates_and_times
from itinerary.core.tracer import RunTracer
from itinerary.core.config import config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SCHEMA = 1
EXIT_SOFT = 2


def transform_line(line: str, lookup: AirportLookup) -> Tuple[str, List[Diagnostic]]:
    """Normalizer -> códigos -> datas, nessa ordem."""
    line = normalize_whitespace(line)
    line = substitute_codes(line, lookup)
    return format_dates_and_times(line)


def collapse_blank_lines(lines: List[str]) -> List[str]:
    """
    Mantém no máximo uma linha em branco consecutiva. Linhas em branco no
    final do texto são descartadas.
    """
    lines = list(lines)
    while lines and lines[-1] == "":
        lines.pop()

    out = []
    empty_run = 0
    for line in lines:
        if trim(line):
            out.append(line)
            empty_run = 0
        else:
            empty_run += 1
            if empty_run <= 1:
                out.append(line)
    return out


def prettify_lines(lines: Iterable[str], lookup: AirportLookup) -> Tuple[List[str], List[Diagnostic]]:
    transformed = []
    diagnostics: List[Diagnostic] = []
    for raw in lines:
        line, diags = transform_line(raw.rstrip("\r\n"), lookup)
        transformed.append(line)
        diagnostics.extend(diags)
    return transformed, diagnostics


def prettify_text(text: str, lookup: AirportLookup) -> Tuple[str, List[Diagnostic]]:
    """Versão em memória do pipeline (usada pela UI e pelos testes)."""
    transformed, diagnostics = prettify_lines(io.StringIO(text, newline=None), lookup)
    return "\n".join(collapse_blank_lines(transformed)), diagnostics


def _read_lines(path: str) -> List[str]:
    encoding = config.ITINERARY_ENCODING
    try:
        with open(path, "r", encoding=encoding) as f:
            return f.readlines()
    except UnicodeDecodeError as e:
        raise InputDecodeError(path, encoding) from e
    except OSError as e:
        raise InputNotFoundError(path) from e


def _write_text(path: str, text: str):
    try:
        with open(path, "w", encoding=config.ITINERARY_ENCODING) as f:
            f.write(text)
    except OSError as e:
        raise OutputWriteError(path) from e


def _save_trace(tracer: RunTracer, trace_out: str, result: PrettifyResult):
    try:
        tracer.save(trace_out)
    except TraceWriteError as e:
        result.add(str(e), Severity.ERROR, stage="trace")
        if result.exit_code == EXIT_OK:
            result.exit_code = EXIT_SOFT


def run_prettifier(
    input_path: str,
    output_path: str,
    lookup_path: str,
    trace_out: Optional[str] = None
) -> PrettifyResult:
    """
    Executa o pipeline completo e decide o exit code.

    Nenhuma exceção de domínio escapa daqui: erros viram Diagnostic no
    resultado. Tabela malformada -> exit 1; arquivos ausentes, ilegíveis,
    falha de escrita da saída ou do trace -> exit 2.
    """
    request_id = str(uuid.uuid4())[:8]
    tracer = RunTracer(request_id)
    trace_out = trace_out or config.ITINERARY_TRACE_OUT

    result = PrettifyResult(request_id=request_id, trace_path=trace_out)

    try:
        # O input é verificado antes da tabela de aeroportos
        with tracer.stage("read_input", input_path) as info:
            raw_lines = _read_lines(input_path)
            info.lines_count = len(raw_lines)
            result.lines_read = len(raw_lines)

        with tracer.stage("load_lookup", lookup_path) as info:
            lookup = load_airport_lookup(lookup_path)
            info.lines_count = len(lookup.records)

        with tracer.stage("transform") as info:
            transformed, diagnostics = prettify_lines(raw_lines, lookup)
            result.diagnostics.extend(diagnostics)
            info.lines_count = len(transformed)
            info.diagnostics_count = len(diagnostics)

        with tracer.stage("collapse") as info:
            final_lines = collapse_blank_lines(transformed)
            result.output_text = "\n".join(final_lines)
            info.lines_count = len(final_lines)

        with tracer.stage("write", output_path) as info:
            _write_text(output_path, result.output_text)
            result.lines_written = len(final_lines)
            info.lines_count = len(final_lines)

    except LookupSchemaError as e:
        for problem in e.problems:
            result.add(problem, Severity.FATAL, stage="load_lookup")
        result.exit_code = EXIT_SCHEMA
    except PrettifierError as e:
        result.add(str(e), Severity.ERROR, stage=tracer.failed_stage)
        result.exit_code = EXIT_SOFT
    finally:
        if trace_out:
            _save_trace(tracer, trace_out, result)

    logger.debug("Run %s finished with exit code %d", request_id, result.exit_code)
    return result
