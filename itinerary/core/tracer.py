import json
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from itinerary.core.errors import TraceWriteError


class StageInfo(BaseModel):
    """Preenchido pela etapa enquanto ela roda."""
    lines_count: Optional[int] = None
    diagnostics_count: int = 0


class TraceEvent(BaseModel):
    """Um registro por etapa: concluída ('ok') ou interrompida ('error')."""
    request_id: str
    stage: str
    status: str
    ts: datetime = Field(default_factory=datetime.now)
    path: Optional[str] = Field(None, description="Arquivo lido/escrito pela etapa")
    latency_ms: float = 0.0
    lines_count: Optional[int] = None
    diagnostics_count: int = 0
    error: Optional[str] = None


class RunTracer:
    """
    Registra as etapas de uma execução do prettifier (read_input, load_lookup,
    transform, collapse, write) com latência, arquivo tocado, linhas e
    quantidade de diagnósticos gerados.
    """

    def __init__(self, request_id: str):
        self.request_id = request_id
        self.events: List[TraceEvent] = []

    @contextmanager
    def stage(self, name: str, path: Optional[str] = None):
        info = StageInfo()
        start = time.perf_counter()
        try:
            yield info
        except Exception as e:
            self._record(name, "error", start, info, path, error=f"{type(e).__name__}: {e}")
            raise
        self._record(name, "ok", start, info, path)

    def _record(self, name, status, start, info: StageInfo, path, error=None):
        self.events.append(TraceEvent(
            request_id=self.request_id,
            stage=name,
            status=status,
            path=path,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            lines_count=info.lines_count,
            diagnostics_count=info.diagnostics_count,
            error=error,
        ))

    @property
    def failed_stage(self) -> Optional[str]:
        for event in self.events:
            if event.status == "error":
                return event.stage
        return None

    def latencies(self) -> Dict[str, float]:
        return {e.stage: e.latency_ms for e in self.events}

    def save(self, output_path: str):
        """Grava JSONL (uma etapa por linha) se o caminho terminar em .jsonl, senão JSON."""
        rows = [e.model_dump(mode="json") for e in self.events]
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                if output_path.endswith(".jsonl"):
                    for row in rows:
                        f.write(json.dumps(row, ensure_ascii=False) + "\n")
                else:
                    json.dump(rows, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise TraceWriteError(output_path) from e
