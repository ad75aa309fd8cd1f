"""
Detecção de notas puladas na numeração de cada emitente.

A numeração é sequencial por (CNPJ do emitente, série). Dentro do lote,
qualquer inteiro ausente entre o menor e o maior número observado é uma
nota pulada. Lacunas antes do primeiro ou depois do último número vistos
não são detectáveis. Saltos muito grandes (acima de
MAX_INTERVALO_SEQUENCIA) são apenas avisados no log, sem listar os números.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from config.settings import MAX_INTERVALO_SEQUENCIA, SERIE_PADRAO
from core.models import SkippedSequence

logger = logging.getLogger(__name__)

# Dígitos iniciais do número ("000123" -> 123, "45A" -> 45)
LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


def find_gaps(numbers: Iterable[int], max_span: Optional[int] = None) -> List[int]:
    """
    Retorna os inteiros ausentes entre números consecutivos (ordenados).

    Um salto com mais de max_span números ausentes (padrão
    settings.MAX_INTERVALO_SEQUENCIA) não é expandido, apenas registrado
    no log.

    Examples:
        >>> find_gaps([100, 101, 103, 104, 107])
        [102, 105, 106]
        >>> find_gaps([5])
        []
    """
    if max_span is None:
        max_span = MAX_INTERVALO_SEQUENCIA

    ordered = sorted(numbers)
    gaps: List[int] = []
    for current, nxt in zip(ordered, ordered[1:]):
        missing = nxt - current - 1
        if missing > max_span:
            logger.warning(
                f"⚠️ Intervalo de {missing} nota(s) entre {current} e {nxt} "
                f"excede o limite de {max_span}; lacuna não listada"
            )
            continue
        if missing > 0:
            gaps.extend(range(current + 1, nxt))
    return gaps


def parse_document_number(numero: Optional[str]) -> Optional[int]:
    """Lê o número da nota pelos dígitos iniciais; None se não houver."""
    if not numero:
        return None
    match = LEADING_DIGITS_RE.match(numero)
    if not match:
        return None
    return int(match.group(1))


class SequenceGapDetector:
    """
    Acumula números por (CNPJ, série) e aponta os que faltam.

    Usage:
        detector = SequenceGapDetector()
        detector.register("12345678000199", "100")
        detector.register("12345678000199", "102")
        detector.detect()  # [SkippedSequence(cnpj=..., serie='1', numeros_pulados=['101'])]
    """

    def __init__(self):
        # dict preserva a ordem em que cada chave apareceu
        self._numbers: Dict[Tuple[str, str], List[int]] = {}

    def register(self, cnpj: str, numero: str, serie: str = SERIE_PADRAO) -> None:
        number = parse_document_number(numero)
        if number is None:
            logger.debug(f"Número não numérico ignorado na sequência: {numero!r} (CNPJ {cnpj})")
            return
        self._numbers.setdefault((cnpj, serie), []).append(number)

    def detect(self) -> List[SkippedSequence]:
        """Sequências com lacunas, na ordem em que o emitente/série apareceu."""
        skipped = []
        for (cnpj, serie), numbers in self._numbers.items():
            gaps = find_gaps(numbers)
            if gaps:
                skipped.append(SkippedSequence(
                    cnpj=cnpj,
                    serie=serie,
                    numeros_pulados=[str(n) for n in gaps],
                ))
        return skipped
