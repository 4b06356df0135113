"""Production startup script for ThemeMetrics.

Starts either the API server or the RQ worker, chosen by the
``PROCESS_TYPE`` environment variable (``api`` by default).
"""

import os
import signal
import sys


def start_api() -> None:
    """Start the FastAPI application with uvicorn."""
    port = os.getenv("PORT", "8000")
    workers = os.getenv("API_WORKERS", "1")
    host = os.getenv("API_HOST", "0.0.0.0")

    print(f"Starting API server on {host}:{port} with {workers} worker(s)...")

    # Use exec to replace the current process
    os.execvp(
        "uvicorn",
        [
            "uvicorn",
            "api.main:app",
            "--host",
            host,
            "--port",
            port,
            "--workers",
            workers,
            "--proxy-headers",
            "--forwarded-allow-ips",
            "*",
        ],
    )


def start_worker() -> None:
    """Start the analysis worker."""
    print("Starting analysis worker...")
    os.execvp(sys.executable, [sys.executable, "-m", "worker.main"])


def signal_handler(signum: int, _frame: object) -> None:
    """Handle shutdown signals gracefully."""
    print(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    process_type = os.getenv("PROCESS_TYPE", "api").lower()
    if process_type == "worker":
        start_worker()
    elif process_type == "api":
        start_api()
    else:
        print(f"Unknown PROCESS_TYPE {process_type!r}; expected 'api' or 'worker'")
        sys.exit(1)


if __name__ == "__main__":
    main()
