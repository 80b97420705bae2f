import sys
import platform
import os
import json
import argparse
import traceback

SAMPLE_LOOKUP = [
    "name,iso_country,municipality,icao_code,iata_code,coordinates",
    'Heathrow Airport,GB,London,EGLL,LHR,"-0.461941, 51.4706"',
]

SAMPLE_INPUT = "Voo #LHR -> *##EGLL em D(2024-03-05T10:00:00Z) às T24(2024-03-05T10:00:00+02:00)"

SAMPLE_EXPECTED = "Voo Heathrow Airport -> London em 05 Mar 2024 às 10:00 (+02:00)"


def check_environment():
    status = "OK"
    details = {
        "sys_executable": sys.executable,
        "python_version": sys.version,
        "platform_info": platform.platform(),
        "cwd": os.getcwd()
    }
    error = None
    return {"check": "environment", "status": status, "details": details, "error": error}

def check_sys_path():
    status = "OK"
    details = {
        "sys_path_total": len(sys.path),
        "sys_path_top5": sys.path[:5]
    }
    error = None
    return {"check": "sys_path", "status": status, "details": details, "error": error}

def check_imports():
    status = "OK"
    details = {}
    error = None

    for lib, tip in (
        ("pydantic", "A biblioteca 'pydantic' não foi encontrada. Seu ambiente virtual está ativado e as dependências instaladas?"),
        ("dotenv", "A biblioteca 'python-dotenv' não foi encontrada. Rode pip install -e . na raiz do projeto."),
    ):
        try:
            __import__(lib)
            details[lib] = "OK"
        except Exception:
            details[lib] = "FAILED"
            error = {"traceback": traceback.format_exc(), "tip": tip}
            return {"check": "imports", "status": "ERROR", "details": details, "error": error}

    try:
        import itinerary.core.schema
        import itinerary.core.pipeline
        details["itinerary.core.schema"] = "OK"
        details["itinerary.core.pipeline"] = "OK"
    except Exception:
        status = "ERROR"
        details["itinerary"] = "FAILED"
        error = {
            "traceback": traceback.format_exc(),
            "tip": "Não foi possível importar 'itinerary.core'. Verifique se você está rodando do root do projeto ou se o pacote foi instalado."
        }

    return {"check": "imports", "status": status, "details": details, "error": error}

def check_sample_run():
    """Roda o pipeline em memória com uma tabela mínima e compara a saída."""
    status = "OK"
    details = {}
    error = None

    try:
        from itinerary.core.lookup_loader import parse_airport_lookup
        from itinerary.core.pipeline import prettify_text

        lookup = parse_airport_lookup(SAMPLE_LOOKUP)
        output, diagnostics = prettify_text(SAMPLE_INPUT, lookup)
        details["lookup_entries"] = len(lookup)
        details["output"] = output
        details["diagnostics"] = [d.message for d in diagnostics]
        if output != SAMPLE_EXPECTED:
            status = "ERROR"
            error = {"traceback": "", "tip": f"Saída inesperada. Esperado: {SAMPLE_EXPECTED!r}"}
    except Exception:
        status = "ERROR"
        details["sample_run"] = "FAILED"
        error = {
            "traceback": traceback.format_exc(),
            "tip": "Falha ao executar o pipeline de exemplo. Verifique o zoneinfo/tzdata e a versão do Python (>= 3.11)."
        }

    return {"check": "sample_run", "status": status, "details": details, "error": error}

def run_diagnostics(as_json=False):
    results = [
        check_environment(),
        check_sys_path(),
        check_imports()
    ]

    # Só roda o pipeline se os imports passaram
    if results[-1]["status"] == "OK":
        results.append(check_sample_run())

    ok = all(r["status"] == "OK" for r in results)

    if as_json:
        print(json.dumps(results, indent=2, ensure_ascii=False))
        return ok

    print("="*50)
    print(" Itinerary Diagnostics Report ".center(50, "="))
    print("="*50)

    for r in results:
        print(f"\n[CHECK]: {r['check'].upper()}")
        print(f"Status : {r['status']}")
        print(f"Details:")
        for k, v in r["details"].items():
            if isinstance(v, list):
                print(f"  - {k}:")
                for item in v:
                    print(f"      {item}")
            else:
                print(f"  - {k}: {v}")
        if r["error"]:
            print(f"\n[! ERROR ENCOUNTERED !]")
            print(f"Tip: {r['error'].get('tip', '')}")
            print(f"Traceback:\n{r['error'].get('traceback', '')}")

    print("\n" + "="*50)
    return ok

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Itinerary Diagnostics Tool")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    args = parser.parse_args()
    sys.exit(0 if run_diagnostics(as_json=args.json) else 1)
