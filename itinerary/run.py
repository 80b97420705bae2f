import argparse
import logging
import sys
from typing import List, Optional

from itinerary.core.config import config
from itinerary.core.pipeline import run_prettifier
from itinerary.core.reporter import report, style
from itinerary.core.schema import Severity

USAGE = (
    "itinerary usage:\n"
    "$ itinerary-prettify ./input.txt ./output.txt ./airport-lookup.csv"
)


def configure_logging():
    logging.basicConfig(
        level=config.ITINERARY_LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def print_usage(file=None):
    print(style(USAGE, Severity.INFO), file=file or sys.stdout)


class PrettifierArgumentParser(argparse.ArgumentParser):
    """Qualquer erro de argumento imprime o aviso + usage e sai com 2."""

    def error(self, message):
        logging.getLogger(__name__).debug("argparse: %s", message)
        print(style("Invalid number of arguments", Severity.WARNING), file=sys.stderr)
        print_usage()
        self.exit(2)


def build_parser() -> argparse.ArgumentParser:
    parser = PrettifierArgumentParser(
        prog="itinerary-prettify",
        description="Itinerary prettifier - códigos de aeroporto e datas legíveis",
        add_help=False,
    )
    parser.add_argument("input", help="Itinerário em texto puro")
    parser.add_argument("output", help="Arquivo de saída")
    parser.add_argument("lookup", help="CSV de aeroportos (airport-lookup.csv)")
    parser.add_argument("--trace-out", type=str, help="Caminho para o trace (json ou jsonl)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if argv == ["-h"]:
        print_usage()
        return 0

    configure_logging()
    args = build_parser().parse_args(argv)

    res = run_prettifier(args.input, args.output, args.lookup, trace_out=args.trace_out)
    report(res.diagnostics)

    if res.trace_path and not any(d.stage == "trace" for d in res.diagnostics):
        print(f"[*] Trace salvo em {res.trace_path}")

    return res.exit_code


if __name__ == "__main__":
    sys.exit(main())
