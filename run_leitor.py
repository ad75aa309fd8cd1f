"""
Leitor de XML fiscal (NF-e, NFC-e e NFS-e).

Lê arquivos XML soltos, pastas e pacotes ZIP (inclusive ZIPs dentro de
ZIPs), extrai os itens de cada documento e gera um relatório com:

1.  Todos os itens em formato unificado.
2.  Resumo por NCM (quantidade, valor, PIS, COFINS, ICMS e percentuais).
3.  Faturamento mensal.
4.  Notas puladas na numeração de cada emitente.

Usage:
    python run_leitor.py notas_junho.zip avulsas/
    python run_leitor.py nfe1.xml nfe2.xml --format csv --output-dir saida
"""

import argparse
import sys
from typing import List, Optional

from config import settings
from core.batch_processor import BatchProcessor
from core.batch_result import BatchResult
from core.exceptions import EmptyBatchError, ExportError
from core.exporters import EXPORTERS, export_result
from extractors.utils import format_number

logger = settings.logger


def print_batch_summary(result: BatchResult) -> None:
    """Imprime resumo do lote processado."""
    print("\n" + "=" * 60)
    print(f"🏢 Empresa: {result.nome_empresa or 'N/A'} ({result.cnpj_empresa or 'sem CNPJ'})")
    print("=" * 60)

    print(f"📄 Documentos lidos: {result.total_documents}")
    for doc_type, total in result.count_by_type().items():
        print(f"   {doc_type}: {total} item(ns)")

    print(f"🏷️  NCMs distintos: {len(result.available_ncms)}")
    for month in result.monthly_revenue:
        print(
            f"📅 {month.mes_ano}: R$ {format_number(month.total_faturamento)} "
            f"(ICMS {month.icms_percentage}%)"
        )

    if result.skipped_sequences:
        print("\n⚠️  Notas puladas:")
        for seq in result.skipped_sequences:
            print(f"   CNPJ {seq.cnpj} série {seq.serie}: {', '.join(seq.numeros_pulados)}")

    if result.errors:
        print(f"\n❌ {result.total_errors} arquivo(s) com erro:")
        for error in result.errors:
            print(f"   {error['file']}: {error['error']}")


def main(argv: Optional[List[str]] = None) -> int:
    """Função principal. Retorna o código de saída do processo."""
    parser = argparse.ArgumentParser(
        description='Leitor de XML fiscal (NF-e, NFC-e e NFS-e)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos:
  # Processar um ZIP e uma pasta
  python run_leitor.py notas_junho.zip avulsas/

  # Gerar CSV em outra pasta
  python run_leitor.py nfe1.xml --format csv --output-dir saida
        """
    )
    parser.add_argument(
        'paths',
        nargs='+',
        help='Arquivos .xml, .zip ou pastas'
    )
    parser.add_argument(
        '--output-dir',
        type=str,
        default=str(settings.DIR_SAIDA),
        help=f'Pasta de saída do relatório (default: {settings.DIR_SAIDA})'
    )
    parser.add_argument(
        '--format',
        choices=sorted(EXPORTERS),
        default=settings.EXPORT_FORMAT,
        help='Formato do relatório (default: %(default)s)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=settings.MAX_WORKERS,
        help='Threads para leitura dos XMLs (default: %(default)s)'
    )

    args = parser.parse_args(argv)

    processor = BatchProcessor(max_workers=args.workers)

    print(f"🔍 Lendo {len(args.paths)} entrada(s)...")
    try:
        result = processor.process_files(args.paths)
    except EmptyBatchError as e:
        print(f"❌ {e}")
        print("   Informe arquivos .xml, .zip ou pastas que contenham XMLs.")
        return 1

    print_batch_summary(result)

    if result.is_empty:
        print("\n📭 Nenhum item extraído, relatório não gerado.")
        return 1

    try:
        output = export_result(result, args.output_dir, args.format)
    except (ExportError, OSError) as e:
        logger.error(f"Falha ao exportar relatório: {e}")
        print(f"❌ Falha ao exportar relatório: {e}")
        return 1

    print(f"\n💾 Relatório salvo em: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
