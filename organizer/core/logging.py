import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configured(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger


def get_security_logger() -> logging.Logger:
    """События входа, блокировок и лимитов запросов."""
    return _configured("security", logging.INFO)


def get_app_logger() -> logging.Logger:
    """Ошибки провайдера и всё остальное, что не относится к безопасности."""
    return _configured("organizer", logging.INFO)
