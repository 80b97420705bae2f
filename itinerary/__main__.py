import argparse
import sys

def main():
    argv = sys.argv[1:]

    # Sem subcomando: argumentos vão direto para o prettifier
    if not argv or argv[0] not in ("doctor", "--version"):
        from itinerary.run import main as run_main
        sys.exit(run_main(argv))

    parser = argparse.ArgumentParser(
        prog="python -m itinerary",
        description="Módulo principal do pacote itinerary"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="itinerary 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Comandos disponíveis")

    # Comando 'doctor'
    doctor_parser = subparsers.add_parser("doctor", help="Executa o diagnóstico de ambiente e pacote")
    doctor_parser.add_argument("--json", action="store_true", help="Saída do diagnóstico em JSON")

    args = parser.parse_args(argv)

    from itinerary.diagnostics import run_diagnostics
    ok = run_diagnostics(as_json=args.json)
    sys.exit(0 if ok else 1)

if __name__ == "__main__":
    main()
