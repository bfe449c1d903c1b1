"""
Celery Tasks
Background export of finished orders to the order history workbook.
"""

import logging
import time
from datetime import datetime, timezone

from app.celery_worker import celery_app
from app.services.excel_manager import ExcelManager
from app.services.orders.base import OrderRecord

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def export_finished_order(self, order_data: dict) -> dict:
    """
    Append a completed or rejected order to the history workbook.

    Args:
        order_data: ``OrderRecord.to_dict()`` of the finished order

    Returns:
        dict: Export result plus task id and timing
    """
    task_id = self.request.id
    order_id = order_data.get("id", "unknown")

    logger.info(f"Task {task_id}: exporting order {order_id}")
    start_time = time.time()

    result = ExcelManager().export_order(order_data)

    elapsed = round(time.time() - start_time, 3)
    result["task_id"] = task_id
    result["processing_time_seconds"] = elapsed

    if result["success"]:
        logger.info(f"Task {task_id}: order {order_id} exported in {elapsed}s")
    else:
        logger.warning(f"Task {task_id}: order {order_id} failed - {result['message']}")

    return result


@celery_app.task
def health_check() -> dict:
    """Simple health check task to verify Celery is working."""
    return {
        "status": "healthy",
        "worker": "celery",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@celery_app.task
def clear_order_history() -> dict:
    """Delete the history workbook (testing/reset)."""
    success = ExcelManager().clear_all()
    return {
        "success": success,
        "message": "Order history cleared" if success else "Failed to clear order history",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def queue_order_export(order: OrderRecord) -> None:
    """
    Hand a finished order to the export worker.

    A broker outage must not fail the status change that already happened,
    so publishing errors are logged, not raised.
    """
    try:
        export_finished_order.delay(order.to_dict())
    except Exception as e:
        logger.error(f"Could not queue history export for order {order.id}: {e}")
