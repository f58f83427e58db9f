"""
Gunicorn configuration for the showroom service.
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Shopify calls dominate request time, so a few sync workers are enough
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = int(os.getenv('GUNICORN_TIMEOUT', '60'))
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

proc_name = 'showroom'
preload_app = True
graceful_timeout = 30


def on_starting(server):
    print("[Gunicorn] Starting showroom server...")


def on_exit(server):
    print("[Gunicorn] Showroom server shutting down...")
