import logging
from tqdm import tqdm

FORMAT = '%(asctime)s %(levelname)s - %(message)s'
FORMATTER = logging.Formatter(FORMAT, datefmt="%d-%m-%Y %H:%M:%S")


class TqdmLoggingHandler(logging.Handler):
    """Route log records through `tqdm.write` so they do not break progress bars."""
    def __init__(self, level=logging.NOTSET):
        super().__init__(level)
        self.setFormatter(FORMATTER)

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg)
            self.flush()
        except Exception:
            self.handleError(record)


def use_tqdm_handler(logger: logging.Logger, level=logging.INFO):
    """Replace the stream handlers of `logger` by a `TqdmLoggingHandler`."""
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler):
            logger.removeHandler(h)
    handler = TqdmLoggingHandler(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
