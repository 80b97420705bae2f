import json
import os
import shutil
import tempfile
import unittest

from itinerary.core.pipeline import (
    run_prettifier, prettify_text, collapse_blank_lines, EXIT_OK, EXIT_SCHEMA, EXIT_SOFT
)
from itinerary.core.lookup_loader import parse_airport_lookup
from itinerary.core.schema import Severity

LOOKUP_CSV = "\n".join([
    "name,municipality,icao_code,iata_code,iso_country,coordinates",
    'Heathrow Airport,London,EGLL,LHR,GB,"-0.461941, 51.4706"',
    'Charles de Gaulle International Airport,Paris,LFPG,CDG,FR,"2.55, 49.0128"',
]) + "\n"

ITINERARY = (
    "Voo   de #LHR para *##LFPG\n"
    "\n"
    "\n"
    "\n"
    "Partida: D(2024-03-05T10:00:00Z) às T24(2024-03-05T10:00:00+02:00)\n"
    "\n"
    "Chegada: T12(2024-03-05T14:30:00+01:00)   \n"
    "\n"
    "\n"
)


class TestPipeline(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.input = self._write("input.txt", ITINERARY)
        self.lookup = self._write("airport-lookup.csv", LOOKUP_CSV)
        self.output = os.path.join(self.tmp, "output.txt")

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _write(self, name, content):
        path = os.path.join(self.tmp, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def _read_output(self):
        with open(self.output, "r", encoding="utf-8") as f:
            return f.read()

    def test_full_run(self):
        res = run_prettifier(self.input, self.output, self.lookup)

        self.assertEqual(res.exit_code, EXIT_OK)
        self.assertEqual(res.diagnostics, [])
        self.assertEqual(self._read_output(), (
            "Voo de Heathrow Airport para Paris\n"
            "\n"
            "Partida: 05 Mar 2024 às 10:00 (+02:00)\n"
            "\n"
            "Chegada: 02:30PM (+01:00)"
        ))
        self.assertEqual(res.lines_read, 9)
        self.assertEqual(res.lines_written, 5)

    def test_collapse_blank_lines(self):
        lines = ["a", "", "", "", "b", "", "c", "", ""]
        self.assertEqual(collapse_blank_lines(lines), ["a", "", "b", "", "c"])

    def test_leading_blank_lines_collapse_to_one(self):
        self.assertEqual(collapse_blank_lines(["", "", "a"]), ["", "a"])

    def test_prettify_text_in_memory(self):
        lookup = parse_airport_lookup(LOOKUP_CSV.splitlines())
        text, diags = prettify_text("#CDG\r\n\r\n\r\n\r\n##EGLL", lookup)
        self.assertEqual(text, "Charles de Gaulle International Airport\n\nHeathrow Airport")
        self.assertEqual(diags, [])

    def test_missing_input_is_soft_error(self):
        res = run_prettifier(os.path.join(self.tmp, "nope.txt"), self.output, self.lookup)

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertEqual(res.diagnostics[0].severity, Severity.ERROR)
        self.assertIn("Input not found", res.diagnostics[0].message)
        self.assertFalse(os.path.exists(self.output))

    def test_missing_lookup_is_soft_error(self):
        res = run_prettifier(self.input, self.output, os.path.join(self.tmp, "nope.csv"))

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertIn("Airport lookup not found", res.diagnostics[0].message)
        self.assertFalse(os.path.exists(self.output))

    def test_empty_lookup_is_soft_error(self):
        res = run_prettifier(self.input, self.output, self._write("empty.csv", ""))

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertIn("empty", res.diagnostics[0].message)

    def test_lookup_without_coordinates_is_fatal(self):
        bad = self._write("bad.csv", "name,municipality,icao_code,iata_code,iso_country,coords\n")
        res = run_prettifier(self.input, self.output, bad)

        self.assertEqual(res.exit_code, EXIT_SCHEMA)
        self.assertTrue(all(d.severity == Severity.FATAL for d in res.diagnostics))
        self.assertTrue(any("coordinates" in d.message for d in res.diagnostics))
        self.assertFalse(os.path.exists(self.output))

    def test_output_write_failure(self):
        out = os.path.join(self.tmp, "missing-dir", "output.txt")
        res = run_prettifier(self.input, out, self.lookup)

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertIn("Error writing to output file", res.diagnostics[0].message)

    def test_unparseable_datetime_does_not_abort(self):
        src = self._write("warn.txt", "T24(2024-03-05\x1cT10:00Z)\n")
        res = run_prettifier(src, self.output, self.lookup)

        self.assertEqual(res.exit_code, EXIT_OK)
        self.assertTrue(os.path.exists(self.output))

    def test_trace_jsonl(self):
        trace_path = os.path.join(self.tmp, "trace.jsonl")
        res = run_prettifier(self.input, self.output, self.lookup, trace_out=trace_path)

        self.assertEqual(res.trace_path, trace_path)
        with open(trace_path, "r", encoding="utf-8") as f:
            events = [json.loads(l) for l in f]

        self.assertEqual(
            [e["stage"] for e in events],
            ["read_input", "load_lookup", "transform", "collapse", "write"],
        )
        self.assertTrue(all(e["request_id"] == res.request_id for e in events))
        self.assertTrue(all(e["status"] == "ok" for e in events))
        self.assertEqual(events[0]["path"], self.input)
        self.assertEqual(events[-1]["path"], self.output)
        self.assertEqual(events[-1]["lines_count"], 5)
        self.assertEqual(events[2]["diagnostics_count"], 0)

    def test_trace_records_error_stage(self):
        trace_path = os.path.join(self.tmp, "trace.json")
        run_prettifier(self.input, self.output, os.path.join(self.tmp, "nope.csv"), trace_out=trace_path)

        with open(trace_path, "r", encoding="utf-8") as f:
            events = json.load(f)
        self.assertEqual(events[-1]["stage"], "load_lookup")
        self.assertEqual(events[-1]["status"], "error")

    def test_trace_write_failure_is_soft_error(self):
        trace_path = os.path.join(self.tmp, "nodir", "trace.json")
        res = run_prettifier(self.input, self.output, self.lookup, trace_out=trace_path)

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertEqual(res.diagnostics[-1].severity, Severity.ERROR)
        self.assertEqual(res.diagnostics[-1].stage, "trace")
        self.assertIn("Error writing trace file", res.diagnostics[-1].message)
        # A saída já foi gravada antes do trace
        self.assertTrue(os.path.exists(self.output))

    def test_trace_write_failure_keeps_schema_exit_code(self):
        bad = self._write("bad.csv", "name,municipality\n")
        trace_path = os.path.join(self.tmp, "nodir", "trace.json")
        res = run_prettifier(self.input, self.output, bad, trace_out=trace_path)

        self.assertEqual(res.exit_code, EXIT_SCHEMA)
        self.assertIn("Error writing trace file", res.diagnostics[-1].message)

    def test_undecodable_input_is_soft_error(self):
        src = os.path.join(self.tmp, "latin1.txt")
        with open(src, "wb") as f:
            f.write(b"Voo para S\xe3o Paulo\n")
        res = run_prettifier(src, self.output, self.lookup)

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertEqual(res.diagnostics[0].severity, Severity.ERROR)
        self.assertIn("Input could not be decoded", res.diagnostics[0].message)
        self.assertNotIn("not found", res.diagnostics[0].message)
        self.assertFalse(os.path.exists(self.output))

    def test_undecodable_lookup_is_soft_error(self):
        bad = os.path.join(self.tmp, "latin1.csv")
        with open(bad, "wb") as f:
            f.write(LOOKUP_CSV.encode("utf-8") + b"Guarulhos,S\xe3o Paulo,SBGR,GRU,BR,0\n")
        res = run_prettifier(self.input, self.output, bad)

        self.assertEqual(res.exit_code, EXIT_SOFT)
        self.assertIn("Airport lookup could not be decoded", res.diagnostics[0].message)
        self.assertEqual(res.diagnostics[0].stage, "load_lookup")
        self.assertFalse(os.path.exists(self.output))

if __name__ == "__main__":
    unittest.main()
