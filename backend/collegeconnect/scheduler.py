"""
Planificateur APScheduler pour la maintenance périodique.

Toutes les heures : suppression des codes QR de présence expirés depuis plus de
QR_CODE_RETENTION_HOURS et des sessions expirées.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from collegeconnect.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _purge_expired() -> None:
    """
    Tâche planifiée : purge des codes et sessions expirés.
    Import local pour éviter les imports circulaires.
    """
    from collegeconnect.services.attendance_code_service import purge_expired_codes
    from collegeconnect.services.session_service import purge_expired_sessions

    db = SessionLocal()
    try:
        codes = purge_expired_codes(db)
        sessions = purge_expired_sessions(db)
        logger.info("Purge : %d code(s) QR et %d session(s) expirés supprimés", codes, sessions)
    except Exception as exc:
        db.rollback()
        logger.error("Erreur lors de la purge des codes et sessions expirés : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _purge_expired,
        trigger="interval",
        hours=1,
        id="purge_expired_codes_sessions",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré — purge des codes et sessions expirés toutes les heures.")


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
