"""
Celery Tasks
Background tasks for exporting sales reports.
"""

import logging
import time
from datetime import datetime

from bistro.celery_worker import celery_app
from bistro.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


class ExportFailed(Exception):
    """Raised so Celery retries an export that reported failure."""


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(ExportFailed,),
    retry_backoff=True
)
def export_sales_report_to_excel(self, report_data: dict) -> dict:
    """
    Export a daily sales report to Excel.
    This task runs asynchronously via Celery worker.

    Args:
        report_data: DailySalesReport.to_dict() output

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    day = report_data.get('date', 'unknown')

    logger.info(f"📋 Task {task_id}: Exporting sales report {day}")
    start_time = time.time()

    result = ExcelManager.export_sales_report(report_data)

    elapsed = round(time.time() - start_time, 3)
    result['task_id'] = task_id
    result['processing_time_seconds'] = elapsed

    if not result['success']:
        logger.warning(f"⚠️ Task {task_id}: Report {day} failed after {elapsed}s - {result['message']}")
        # Celery will auto-retry based on configuration
        raise ExportFailed(result['message'])

    logger.info(f"✅ Task {task_id}: Report {day} completed in {elapsed}s")
    return result


@celery_app.task
def health_check() -> dict:
    """
    Simple health check task to verify Celery is working.
    """
    return {
        'status': 'healthy',
        'worker': 'celery',
        'timestamp': datetime.now().isoformat()
    }


@celery_app.task
def clear_sales_reports() -> dict:
    """
    Delete every exported sales report (for testing/reset purposes).
    """
    success = ExcelManager.clear_all()
    return {
        'success': success,
        'message': 'Sales reports cleared' if success else 'Failed to clear sales reports',
        'timestamp': datetime.now().isoformat()
    }
