"""
Настройка логирования для AudioPriority
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from .config.unified_config_loader import LoggingConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Настраивает корневой логгер: основной файл, файл ошибок, консоль"""
    if config is None:
        config = LoggingConfig(
            level="INFO",
            dir="~/Library/Logs/AudioPriority",
            console=True,
            max_bytes=10 * 1024 * 1024,
            backup_count=5,
        )

    log_level = getattr(logging, config.level.upper(), logging.INFO)
    log_dir = Path(config.dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    main_log_file = log_dir / "audio_priority.log"
    error_log_file = log_dir / "errors.log"

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Очищаем существующие обработчики
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # 1. Файл логов (с ротацией)
    file_handler = logging.handlers.RotatingFileHandler(
        main_log_file,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 2. Файл ошибок (отдельно)
    error_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)

    # 3. Консоль (stderr, чтобы не мешать выводу команд)
    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Директория логов: {log_dir}")
    logger.info(f"Уровень логирования: {logging.getLevelName(log_level)}")
    return logger


def get_logger(name):
    """Получает логгер с указанным именем"""
    return logging.getLogger(name)
