import logging, os, sys


def setup_logging(level_name=None):
    level = getattr(logging, (level_name or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    # Log to stdout (captured by the container runtime)
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(logging.Formatter('%(asctime)s | %(levelname)s | %(name)s | %(message)s'))
    root.addHandler(sh)

    logging.captureWarnings(True)
    for noisy in ("pymongo", "urllib3", "httpx", "httpcore", "anthropic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    # Our package and the WSGI server emit at the chosen level
    for name in (
        "vitamin_bot",
        "vitamin_bot.seed",
        "vitamin_bot.routes",
        "gunicorn.error",
        "gunicorn.access",
    ):
        logging.getLogger(name).setLevel(level)
