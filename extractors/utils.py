"""
Módulo de utilidades compartilhadas para extratores.

Contém as funções de conversão numérica usadas por todo o pipeline:
- Leitura de números em formato XML (1234.56) ou brasileiro (1.234,56)
- Formatação para exibição no padrão pt-BR (1.234,56)
- Normalização de nomes para uso em arquivos de relatório

Os valores de quantidade, preço e impostos trafegam como texto formatado
dentro dos registros e só voltam a ser números na agregação/exportação.
"""

import math
import re
import unicodedata
from typing import Optional, Union

# =============================================================================
# REGEX COMPILADOS (evita recompilação a cada chamada)
# =============================================================================

# Prefixo numérico aceito (mesma tolerância de um parseFloat: "12abc" -> 12)
LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Caracteres que não são letras, dígitos, "_" ou espaço
NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)


# =============================================================================
# PARSING DE VALORES NUMÉRICOS
# =============================================================================


def _to_float(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Lê um número de texto sem nunca levantar exceção.

    Regras:
    - "1.234,56" (ponto e vírgula) -> o último separador é o decimal
    - "1,234.56" (vírgula e ponto) -> idem: vírgula é milhar, ponto é decimal
    - "1234,56" (só vírgula) -> vírgula é decimal
    - "1234.56" (só ponto) -> ponto é decimal (formato dos XMLs)

    Returns:
        float lido ou None se não houver número no início do texto
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value).strip()
    if not text:
        return None

    if "," in text and "." in text:
        # O separador que aparece por último é o decimal
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")

    match = LEADING_NUMBER_RE.match(text)
    if not match:
        return None

    try:
        return float(match.group(0))
    except ValueError:
        return None


def parse_number(value: Union[str, int, float, None]) -> float:
    """
    Converte texto numérico (XML ou pt-BR) para float.

    Nunca levanta exceção: entradas vazias, None ou inválidas viram 0.0.

    Args:
        value: Texto como "10.50", "1.234,56", "" ou None

    Returns:
        float: Valor numérico ou 0.0 se inválido

    Examples:
        >>> parse_number("1.234,56")
        1234.56
        >>> parse_number("10.50")
        10.5
        >>> parse_number(None)
        0.0
    """
    number = _to_float(value)
    return 0.0 if number is None else number


def format_number(value: Union[str, int, float, None]) -> str:
    """
    Formata um número no padrão brasileiro com duas casas decimais.

    Args:
        value: Texto numérico ou número

    Returns:
        str: Valor como "1.234,56", ou "" se não for possível ler um número

    Examples:
        >>> format_number("1234.5")
        '1.234,50'
        >>> format_number("abc")
        ''
    """
    number = _to_float(value)
    if number is None or math.isinf(number):
        return ""

    # 1,234.56 -> 1.234,56
    formatted = f"{number:,.2f}"
    return formatted.replace(",", "X").replace(".", ",").replace("X", ".")


# =============================================================================
# NORMALIZAÇÃO DE TEXTO
# =============================================================================


def strip_accents(value: str) -> str:
    """
    Remove acentos de uma string.

    Example:
        >>> strip_accents("Código Eletrônico")
        'Codigo Eletronico'
    """
    if not value:
        return ""
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def normalize_report_name(name: Optional[str]) -> str:
    """
    Gera um identificador seguro para nome de arquivo a partir da razão social.

    Example:
        >>> normalize_report_name("Padaria São José Ltda.")
        'padaria_sao_jose_ltda'
    """
    if not name:
        return ""
    cleaned = NON_WORD_RE.sub("", strip_accents(name))
    return re.sub(r"\s+", "_", cleaned.strip()).lower()
