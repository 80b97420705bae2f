from typing import List, Optional


class PrettifierError(Exception):
    """Classe base para erros do prettifier de itinerários"""
    pass


class LookupNotFoundError(PrettifierError):
    """Levantado quando a tabela de aeroportos não pode ser aberta"""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Airport lookup not found {path}")


class LookupEmptyError(PrettifierError):
    """Levantado quando a tabela de aeroportos não tem nem o cabeçalho"""
    def __init__(self, path: str):
        self.path = path
        super().__init__("Airport lookup file is empty")


class LookupSchemaError(PrettifierError):
    """
    Tabela de aeroportos malformada (cabeçalho ou linha de dados).
    Carrega todos os problemas encontrados em `problems`.
    """
    def __init__(self, problems: List[str], line: Optional[str] = None):
        self.problems = list(problems)
        self.line = line
        super().__init__("; ".join(self.problems))


class InputNotFoundError(PrettifierError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Input not found: {path}")


class OutputWriteError(PrettifierError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Error writing to output file: {path}")


class InputDecodeError(PrettifierError):
    def __init__(self, path: str, encoding: str):
        self.path = path
        self.encoding = encoding
        super().__init__(f"Input could not be decoded as {encoding}: {path}")


class LookupDecodeError(PrettifierError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Airport lookup could not be decoded as UTF-8: {path}")


class TraceWriteError(PrettifierError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Error writing trace file: {path}")
