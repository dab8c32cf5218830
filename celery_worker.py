"""Celery worker entry point.

Run with: celery -A celery_worker.celery_app worker --loglevel=info
"""
import logging
import sys

# Configure logging before Celery is imported so worker logs go to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

from nearme.infrastructure.celery_app import celery_app  # noqa: E402

if __name__ == "__main__":
    celery_app.start()
