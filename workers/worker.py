"""Worker script to run Celery workers."""

from core.config import settings
from core.middleware.logging import setup_logging
from workers.celery_app import celery_app


def main():
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)
    celery_app.worker_main(
        argv=[
            "worker",
            f"--loglevel={settings.log_level.lower()}",
            "--concurrency=4",
            "-Q",
            "default,notifications",
        ]
    )


if __name__ == "__main__":
    main()
