"""
Logging client configuration for sending logs to centralized service.
"""
import logging
import logging.handlers
import os


def setup_logger(service_name: str) -> logging.Logger:
    """
    Setup logger that logs to the console and, when configured, to the
    centralized logging service.

    Args:
        service_name: Name of the logger ('retrosnap-gateway', 'gateway-auth', ...)

    Returns:
        Configured logger
    """
    log_host = os.getenv('LOGGING_HOST', '')
    log_port = int(os.getenv('LOGGING_PORT', 9999))

    logger = logging.getLogger(service_name)
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    logger.handlers = []

    # Add service name to all log records
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        if not hasattr(record, 'service') or record.name.startswith(service_name):
            record.service = service_name
        return record

    logging.setLogRecordFactory(record_factory)

    if log_host:
        socket_handler = logging.handlers.SocketHandler(log_host, log_port)
        logger.addHandler(socket_handler)

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        '%(asctime)s - [%(service)s] - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger
