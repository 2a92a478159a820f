#!/usr/bin/env python
"""
Celery Worker Runner
====================
Script to start the cleanup worker and its beat scheduler.

Usage:
    python workers/run_worker.py           # Start cleanup worker
    python workers/run_worker.py --beat    # Start beat scheduler
    python workers/run_worker.py --flower  # Start monitoring
"""

import os
import subprocess
import sys
from typing import List, Optional

# The backend directory holds the `app` package
BACKEND_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)


def worker_argv(concurrency: int = 2) -> List[str]:
    """Arguments for a worker that only consumes the cleanup queue."""
    return [
        'worker',
        '--loglevel=info',
        '-Q', 'cleanup',
        f'--concurrency={concurrency}',
    ]


def start_worker(concurrency: int = 2):
    """Start Celery worker."""
    from app.core.celery_app import celery_app
    celery_app.worker_main(worker_argv(concurrency))


def start_beat():
    """Start Celery beat scheduler."""
    from app.core.celery_app import celery_app
    celery_app.Beat(loglevel='info').run()


def start_flower():
    """Start Flower monitoring."""
    subprocess.run(
        ['celery', '-A', 'app.core.celery_app', 'flower', '--port=5555'],
        cwd=BACKEND_DIR,
    )


def main(argv: Optional[List[str]] = None):
    import argparse
    
    parser = argparse.ArgumentParser(description='Run the cleanup worker')
    parser.add_argument('--beat', action='store_true', help='Start beat scheduler')
    parser.add_argument('--flower', action='store_true', help='Start flower monitoring')
    parser.add_argument('--concurrency', type=int, default=2, help='Worker processes')
    
    args = parser.parse_args(argv)
    
    if args.beat:
        print("Starting Celery Beat scheduler...")
        start_beat()
    elif args.flower:
        print("Starting Flower monitoring...")
        start_flower()
    else:
        print("Starting cleanup worker...")
        start_worker(args.concurrency)


if __name__ == '__main__':
    main()
