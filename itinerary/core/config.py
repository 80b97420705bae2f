import os
from dotenv import load_dotenv

load_dotenv()


def _color_default() -> int:
    # https://no-color.org
    if os.getenv("NO_COLOR"):
        return 0
    return int(os.getenv("ITINERARY_COLOR", "1"))


class Config:
    # 1 para ativado, 0 para desativado
    ITINERARY_COLOR = _color_default()

    ITINERARY_ENCODING = os.getenv("ITINERARY_ENCODING", "utf-8")
    ITINERARY_LOG_LEVEL = os.getenv("ITINERARY_LOG_LEVEL", "WARNING").upper()

    # Caminho padrão do trace quando --trace-out não é informado
    ITINERARY_TRACE_OUT = os.getenv("ITINERARY_TRACE_OUT") or None

config = Config()
