import re

_VERTICAL_BREAKS = re.compile(r"[\r\x0b\x0c]+")
# Apenas espaço ASCII: [ \t\n\r\f\v]; NBSP e afins ficam intactos
_WHITESPACE_RUN = re.compile(r"\s+", re.ASCII)
_PARAGRAPH_RUN = re.compile(r"\n{2,}")

# Caracteres de controle e espaço (<= U+0020) removidos das pontas
TRIM_CHARS = "".join(map(chr, range(33)))


def trim(text: str) -> str:
    return text.strip(TRIM_CHARS)


def normalize_whitespace(line: str) -> str:
    """
    Limpa uma linha do itinerário:
      1. sequências de CR / VT / FF viram um único '\\n';
      2. qualquer sequência de espaço em branco ASCII vira um único espaço e,
         em seguida, sequências de 2+ quebras voltam a ser exatamente '\\n\\n';
      3. remove das pontas espaços e caracteres de controle.
    É idempotente: normalize_whitespace(normalize_whitespace(x)) == normalize_whitespace(x).
    """
    line = _VERTICAL_BREAKS.sub("\n", line)
    line = _PARAGRAPH_RUN.sub("\n\n", _WHITESPACE_RUN.sub(" ", line))
    return trim(line)
