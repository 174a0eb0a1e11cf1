import multiprocessing
import os

# Rapphim API behind gunicorn: uvicorn workers serving app.main:app
wsgi_app = "app.main:app"
worker_class = "uvicorn.workers.UvicornWorker"
proc_name = "rapphim-api"

bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"

# every worker opens its own DB pool (DB_POOL_SIZE + DB_MAX_OVERFLOW connections)
workers = int(os.getenv("WEB_CONCURRENCY", min(4, multiprocessing.cpu_count() + 1)))

# catalog requests are short; the view counter runs after the response
timeout = int(os.getenv("GUNICORN_TIMEOUT", "30"))
graceful_timeout = 20
keepalive = 5

max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", "2000"))
max_requests_jitter = 200

# ✅ LOGS TO STDOUT
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'

logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "generic": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "generic",
            "stream": "ext://sys.stdout",
        },
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "gunicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "gunicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "app": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}
