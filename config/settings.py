import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from dotenv import load_dotenv

# Carrega as variáveis do arquivo .env para o ambiente
load_dotenv()

# Caminhos Base
BASE_DIR = Path(__file__).resolve().parent.parent
DIR_SAIDA = Path(os.getenv('LEITOR_DIR_SAIDA', str(BASE_DIR / "data" / "output")))

# --- Entrada ---
# Apenas estes tipos de arquivo são aceitos na fronteira (upload / linha de comando)
EXTENSOES_ACEITAS = {'.xml', '.zip'}

# As fontes não expõem a série no ponto em que a sequência é verificada,
# então todas as notas de um emitente caem na mesma série.
SERIE_PADRAO = '1'

# Maior salto expandido em notas puladas; acima disso o intervalo só é avisado no log
MAX_INTERVALO_SEQUENCIA = int(os.getenv('LEITOR_MAX_INTERVALO_SEQUENCIA', '10000'))

# --- Processamento ---
# Número de threads usadas no parse dos XMLs. A agregação é sempre sequencial.
MAX_WORKERS = int(os.getenv('LEITOR_MAX_WORKERS', '4'))

# --- Exportação ---
# 'xlsx' (planilha com resumos) ou 'csv' (apenas os itens)
EXPORT_FORMAT = os.getenv('LEITOR_EXPORT_FORMAT', 'xlsx').lower()
EXPORT_COLUMN_WIDTH = 20

# --- Configuração de Logging com Rotação ---
# RotatingFileHandler evita crescimento descontrolado de logs
LOG_DIR = Path(os.getenv('LEITOR_LOG_DIR', str(BASE_DIR / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "leitor_xml.log"
LOG_LEVEL = os.getenv('LEITOR_LOG_LEVEL', 'INFO').upper()

# Loggers da aplicação (os módulos usam logging.getLogger(__name__))
APP_LOGGERS = ('leitor_xml', 'core', 'extractors', 'ingestors')

# Handler com rotação: 10MB por arquivo, mantém 5 backups
rotating_handler = RotatingFileHandler(
    LOG_FILE,
    maxBytes=10 * 1024 * 1024,  # 10MB
    backupCount=5,
    encoding='utf-8'
)

log_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
rotating_handler.setFormatter(log_formatter)

# Também envia para console
console_handler = logging.StreamHandler()
console_handler.setFormatter(log_formatter)

for _name in APP_LOGGERS:
    _app_logger = logging.getLogger(_name)
    _app_logger.setLevel(LOG_LEVEL)
    if rotating_handler not in _app_logger.handlers:
        _app_logger.addHandler(rotating_handler)
        _app_logger.addHandler(console_handler)

logger = logging.getLogger('leitor_xml')
