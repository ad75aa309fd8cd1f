"""
Processador de Lotes (Batch Processor).

Este módulo orquestra o pipeline de um lote de XMLs fiscais:

    bytes -> texto -> árvore XML -> tipo -> itens -> agregação

Etapas:
1. Extração: cada documento é lido de forma independente, em paralelo
   (ThreadPoolExecutor). Um XML inválido não interrompe o lote.
2. Consolidação: os resultados são percorridos NA ORDEM DE ENTRADA por um
   único laço, que alimenta o agregador (NCM/mês) e o detector de notas
   puladas, e define a empresa do lote (emitente do primeiro documento
   com itens).

Cada chamada de process_batch() cria agregador e detector novos: nada é
compartilhado entre lotes.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from config import settings
from core.aggregator import FiscalAggregator
from core.batch_result import BatchResult
from core.exceptions import EmptyBatchError
from core.interfaces import DocumentSourceStrategy
from core.models import XmlDocument
from core.sequence_gaps import SequenceGapDetector
from extractors.xml_extractor import XmlExtractionResult, XmlExtractor
from ingestors.archive import ArchiveIngestor, decode_xml_bytes

logger = logging.getLogger(__name__)

# Entradas aceitas: texto XML, bytes, par (nome, texto) ou XmlDocument
DocumentInput = Union[str, bytes, Tuple[str, Union[str, bytes]], XmlDocument]


class BatchProcessor:
    """
    Processador de lotes de documentos fiscais XML.

    Attributes:
        extractor: Extrator de XML (um por processador, sem estado entre documentos)
        ingestor: Fonte de arquivos usada por process_files()
        max_workers: Threads da etapa de extração (1 = sequencial)

    Usage:
        batch_processor = BatchProcessor()
        result = batch_processor.process_files(["notas_junho.zip"])
        print(result.ncm_summaries)
    """

    def __init__(
        self,
        extractor: Optional[XmlExtractor] = None,
        max_workers: Optional[int] = None,
        ingestor: Optional[DocumentSourceStrategy] = None,
    ):
        """
        Inicializa o processador de lotes.

        Args:
            extractor: Extrator de XML (DIP)
            max_workers: Número de threads; padrão settings.MAX_WORKERS
            ingestor: Fonte de documentos; padrão ArchiveIngestor
        """
        self.extractor = extractor or XmlExtractor()
        self.max_workers = max(1, max_workers or settings.MAX_WORKERS)
        self.ingestor = ingestor or ArchiveIngestor()

    def process_files(self, paths: Iterable[Union[str, Path]]) -> BatchResult:
        """
        Coleta XMLs de arquivos, pastas e ZIPs e processa como um lote.

        Raises:
            EmptyBatchError: Se nenhum XML for encontrado nas entradas.
        """
        documents = self.ingestor.collect(paths)
        if not documents:
            raise EmptyBatchError("Nenhum arquivo XML encontrado para processar.")
        return self.process_batch(documents)

    def process_batch(self, documents: Sequence[DocumentInput]) -> BatchResult:
        """
        Processa um lote de documentos XML.

        Args:
            documents: Textos XML, bytes, pares (nome, texto) ou XmlDocument

        Returns:
            BatchResult com itens, agregações, notas puladas e erros
        """
        items = [self._normalize_input(doc, index) for index, doc in enumerate(documents)]
        result = BatchResult(total_documents=len(items))

        if not items:
            logger.info("Lote vazio, nada a processar")
            return result

        extractions = self._extract_all(items)

        aggregator = FiscalAggregator()
        gap_detector = SequenceGapDetector()
        subject_defined = False

        for extraction in extractions:
            if not extraction.success:
                result.add_error(extraction.source_name, extraction.error or "Erro desconhecido")
                continue

            if not extraction.records:
                continue

            first = extraction.records[0]

            if not subject_defined:
                result.nome_empresa = first.nome_emitente
                result.cnpj_empresa = first.cnpj_emitente
                subject_defined = True

            # Um número por documento: o do primeiro item
            if first.numero:
                gap_detector.register(first.cnpj_emitente, first.numero, settings.SERIE_PADRAO)

            aggregator.add_records(extraction.records)
            result.records.extend(extraction.records)

        aggregation = aggregator.finalize()
        result.ncm_summaries = aggregation.ncm_summaries
        result.monthly_revenue = aggregation.monthly_revenue
        result.available_ncms = aggregation.available_ncms
        result.available_months = aggregation.available_months
        result.skipped_sequences = gap_detector.detect()

        logger.info(
            f"✅ Lote processado: {result.total_documents} documento(s), "
            f"{aggregator.records_seen} item(ns) agregado(s), {result.total_errors} erro(s)"
        )
        return result

    def _extract_all(self, items: List[Tuple[str, str]]) -> List[XmlExtractionResult]:
        """Extrai todos os documentos; a ordem do resultado é a ordem de entrada."""
        if self.max_workers == 1 or len(items) == 1:
            return [self._extract_one(item) for item in items]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(self._extract_one, items))

    def _extract_one(self, item: Tuple[str, str]) -> XmlExtractionResult:
        name, text = item
        return self.extractor.extract(text, source_name=name)

    @staticmethod
    def _normalize_input(document: DocumentInput, index: int) -> Tuple[str, str]:
        """Converte qualquer entrada aceita em (nome, texto)."""
        default_name = f"documento_{index + 1}"

        if isinstance(document, XmlDocument):
            return document.name, decode_xml_bytes(document.content)

        if isinstance(document, tuple):
            name, content = document
            if isinstance(content, bytes):
                content = decode_xml_bytes(content)
            return name or default_name, content

        if isinstance(document, bytes):
            return default_name, decode_xml_bytes(document)

        return default_name, document


def process_batch(documents: Sequence[DocumentInput]) -> BatchResult:
    """
    Função utilitária para processar um lote.

    Wrapper simples para uso direto sem instanciar a classe.

    Args:
        documents: Textos XML, bytes, pares (nome, texto) ou XmlDocument

    Returns:
        BatchResult com documentos processados
    """
    processor = BatchProcessor()
    return processor.process_batch(documents)


def process_files(paths: Iterable[Union[str, Path]]) -> BatchResult:
    """
    Função utilitária para processar arquivos, pastas e ZIPs.

    Raises:
        EmptyBatchError: Se nenhum XML for encontrado.
    """
    processor = BatchProcessor()
    return processor.process_files(paths)
