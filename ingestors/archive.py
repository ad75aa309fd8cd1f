"""
Ingestão de XMLs a partir de arquivos, pastas e pacotes ZIP.

Fluxo:
1. Cada caminho de entrada é expandido (pastas em ordem alfabética).
2. Arquivos .xml são lidos como estão.
3. Arquivos .zip são abertos em memória; ZIPs dentro de ZIPs também.
4. Qualquer outra extensão é ignorada (com log).

O resultado é uma lista plana de XmlDocument (nome + bytes), na ordem
em que os arquivos foram encontrados. A decodificação para texto fica
em decode_xml_bytes().
"""

import io
import logging
import zipfile
import zlib
from pathlib import Path
from typing import Iterable, List, Union

from config import settings
from core.interfaces import DocumentSourceStrategy
from core.models import XmlDocument

logger = logging.getLogger(__name__)

XML_SUFFIX = '.xml'
ZIP_SUFFIX = '.zip'

# Separador entre o nome do ZIP e o caminho do membro ("notas.zip::2024/nfe1.xml")
MEMBER_SEPARATOR = '::'

# Falhas de leitura de um único membro (CRC inválido, senha, compressão não suportada)
UNREADABLE_MEMBER_ERRORS = (zipfile.BadZipFile, RuntimeError, NotImplementedError, zlib.error)


def decode_xml_bytes(content: bytes) -> str:
    """
    Decodifica o conteúdo de um XML.

    Tenta UTF-8 (com ou sem BOM); se falhar, usa latin-1, que aceita
    qualquer sequência de bytes (XMLs antigos de prefeituras).
    """
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.debug("Conteúdo não é UTF-8, decodificando como latin-1")
        return content.decode('latin-1')


class ArchiveIngestor(DocumentSourceStrategy):
    """
    Coleta XMLs de arquivos soltos, pastas e ZIPs (inclusive aninhados).

    Usage:
        ingestor = ArchiveIngestor()
        documentos = ingestor.collect(["notas_junho.zip", "avulsas/"])
    """

    def collect(self, paths: Iterable[Union[str, Path]]) -> List[XmlDocument]:
        documents: List[XmlDocument] = []
        for raw_path in paths:
            path = Path(raw_path)
            if path.is_dir():
                for child in sorted(p for p in path.rglob('*') if p.is_file()):
                    documents.extend(self._collect_file(child))
            elif path.is_file():
                documents.extend(self._collect_file(path))
            else:
                logger.warning(f"⚠️ Caminho não encontrado: {path}")

        logger.info(f"📦 {len(documents)} XML(s) encontrado(s)")
        return documents

    def collect_bytes(self, filename: str, content: bytes) -> List[XmlDocument]:
        """
        Coleta XMLs de um arquivo já em memória (ex: upload).

        Args:
            filename: Nome original, usado para decidir entre XML e ZIP
            content: Bytes do arquivo
        """
        suffix = Path(filename).suffix.lower()
        if suffix not in settings.EXTENSOES_ACEITAS:
            logger.info(f"Arquivo ignorado (extensão não suportada): {filename}")
            return []
        if suffix == ZIP_SUFFIX:
            return self._collect_zip(filename, content)
        return [XmlDocument(name=filename, content=content)]

    def _collect_file(self, path: Path) -> List[XmlDocument]:
        if path.suffix.lower() not in settings.EXTENSOES_ACEITAS:
            logger.info(f"Arquivo ignorado (extensão não suportada): {path}")
            return []
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.warning(f"⚠️ Arquivo ilegível ignorado ({path}): {e}")
            return []
        return self.collect_bytes(str(path), content)

    def _collect_zip(self, archive_name: str, content: bytes) -> List[XmlDocument]:
        """
        Abre o ZIP em memória e coleta os membros .xml, recursivamente.

        Um membro ilegível (CRC inválido, criptografado, compressão não
        suportada) é ignorado com log; os demais membros são mantidos.
        """
        try:
            zf = zipfile.ZipFile(io.BytesIO(content))
        except zipfile.BadZipFile as e:
            logger.warning(f"⚠️ ZIP corrompido ignorado ({archive_name}): {e}")
            return []

        documents: List[XmlDocument] = []
        with zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue

                member_name = f"{archive_name}{MEMBER_SEPARATOR}{info.filename}"
                lower = info.filename.lower()

                if not lower.endswith((XML_SUFFIX, ZIP_SUFFIX)):
                    logger.debug(f"Membro ignorado no ZIP: {member_name}")
                    continue

                try:
                    member_content = zf.read(info)
                except UNREADABLE_MEMBER_ERRORS as e:
                    logger.warning(f"⚠️ Membro ilegível ignorado ({member_name}): {e}")
                    continue

                if lower.endswith(XML_SUFFIX):
                    documents.append(XmlDocument(name=member_name, content=member_content))
                else:
                    documents.extend(self._collect_zip(member_name, member_content))

        return documents
