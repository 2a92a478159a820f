"""
Celery Workers Package
======================
Runs the cleanup jobs out of process (CLEANUP_MODE=celery).

Usage:
    # Start worker
    celery -A app.core.celery_app worker --loglevel=info -Q cleanup
    
    # Start beat scheduler
    celery -A app.core.celery_app beat --loglevel=info
"""
