import logging
import os
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s - %(message)s'


def _log_dir() -> str:
    return os.getenv('LOG_DIR', 'log')


def _level_from_env(var_name: str = 'LOG_LEVEL', fallback: str = 'INFO') -> int:
    level_name = os.getenv(var_name, fallback)
    return getattr(logging, level_name.upper(), logging.INFO)


def _custom_namer(default_name: str) -> str:
    """轮转文件命名为 name_YYYYMMDD.log。"""
    base_filename, date_suffix = default_name.rsplit('.', 1)
    log_dirname, log_basename = os.path.split(base_filename)
    log_prefix, log_ext = os.path.splitext(log_basename)
    return os.path.join(log_dirname, f"{log_prefix}_{date_suffix}{log_ext}")


def _daily_file_handler(name: str, level: int) -> TimedRotatingFileHandler:
    """构建按自然日切分的文件处理器（<LOG_DIR>/<name>.log，轮转后为 <name>_YYYYMMDD.log）。"""
    log_dir = _log_dir()
    os.makedirs(log_dir, exist_ok=True)
    filename = os.path.join(log_dir, f'{name}.log')

    handler = TimedRotatingFileHandler(filename, when='midnight', backupCount=14, encoding='utf-8')
    handler.suffix = "%Y%m%d"
    handler.namer = _custom_namer
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def init_logging() -> None:
    """初始化应用日志与 werkzeug 日志。"""
    level = _level_from_env()

    for logger_name in ('app', 'flask.app'):
        app_logger = logging.getLogger(logger_name)
        app_logger.setLevel(level)
        app_logger.handlers.clear()
        app_logger.addHandler(_daily_file_handler('app', level))

    logging.getLogger('flask.app').addHandler(_daily_file_handler('flask_error', logging.ERROR))

    werkzeug_logger = logging.getLogger('werkzeug')
    werkzeug_logger.setLevel(_level_from_env('WERKZEUG_LOG_LEVEL', 'INFO'))
    werkzeug_logger.addHandler(_daily_file_handler('werkzeug_error', logging.ERROR))


def get_logger(name: str) -> logging.Logger:
    """为功能模块创建独立 logger，按日切分。"""
    logger = logging.getLogger(name)
    logger.setLevel(_level_from_env())
    if not logger.handlers:
        logger.addHandler(_daily_file_handler(name, logger.level))
    return logger
