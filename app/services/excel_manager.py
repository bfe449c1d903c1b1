"""
Order History Workbook

Appends finished orders (completed or rejected) to an Excel workbook that
the back office opens directly. Several Celery workers may export at
once, so every read-modify-write of the file happens under a FileLock.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
from filelock import FileLock, Timeout

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class ExcelManager:
    """
    Process-safe access to the order history workbook.

    Args:
        directory: Folder holding the workbook (defaults to DATA_DIRECTORY)
        filename: Workbook name (defaults to HISTORY_FILENAME)
        lock_timeout: Seconds to wait for the file lock
    """

    ORDER_COLUMNS = [
        "order_id",
        "restaurant_id",
        "status",
        "order_time",
        "last_update_time",
        "completion_time",
        "rejection_reason",
        "processed_by_user_id",
        "items",
        "subtotal",
        "taxes",
        "delivery_fee",
        "total",
        "exported_at",
    ]

    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        filename: Optional[str] = None,
        lock_timeout: Optional[int] = None,
    ):
        settings = get_settings()
        self.directory = Path(directory or settings.data_directory)
        self.path = self.directory / (filename or settings.history_filename)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.excel_lock_timeout

    def _ensure_data_dir(self) -> None:
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.directory}")

    def _load_or_create_df(self) -> pd.DataFrame:
        if self.path.exists():
            try:
                return pd.read_excel(self.path, engine="openpyxl")
            except Exception as e:
                logger.warning(f"Error reading {self.path}: {e}")
        return pd.DataFrame(columns=self.ORDER_COLUMNS)

    def _row(self, order_data: dict[str, Any], export_time: str) -> dict[str, Any]:
        items = order_data.get("items") or []
        return {
            "order_id": order_data["id"],
            "restaurant_id": order_data.get("restaurant_id"),
            "status": order_data.get("status"),
            "order_time": order_data.get("order_time"),
            "last_update_time": order_data.get("last_update_time"),
            "completion_time": order_data.get("completion_time"),
            "rejection_reason": order_data.get("rejection_reason"),
            "processed_by_user_id": order_data.get("processed_by_user_id"),
            "items": items if isinstance(items, str) else json.dumps(items),
            "subtotal": order_data.get("subtotal"),
            "taxes": order_data.get("taxes"),
            "delivery_fee": order_data.get("delivery_fee"),
            "total": order_data.get("total"),
            "exported_at": export_time,
        }

    def export_order(self, order_data: dict[str, Any]) -> dict[str, Any]:
        """
        Write one finished order to the workbook.

        Re-exporting an order (a retried task) replaces its earlier row.

        Args:
            order_data: ``OrderRecord.to_dict()`` output

        Returns:
            dict: ``success``, ``message``, ``order_id`` and ``exported_at``
        """
        self._ensure_data_dir()

        order_id = order_data.get("id", "unknown")
        result = {
            "success": False,
            "message": "",
            "order_id": order_id,
            "exported_at": None,
        }

        try:
            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                logger.debug(f"Lock acquired for Order {order_id}")

                df = self._load_or_create_df()
                if not df.empty:
                    df = df[df["order_id"] != order_id]

                export_time = datetime.now(timezone.utc).isoformat()
                new_row = pd.DataFrame([self._row(order_data, export_time)], columns=self.ORDER_COLUMNS)
                df = new_row if df.empty else pd.concat([df, new_row], ignore_index=True)
                df.to_excel(str(self.path), index=False, engine="openpyxl")

                logger.info(f"Order {order_id} ({order_data.get('status')}) exported to history")

                result["success"] = True
                result["message"] = f"Order {order_id} exported"
                result["exported_at"] = export_time

        except Timeout:
            result["message"] = f"Lock timeout ({self.lock_timeout}s)"
            logger.error(f"Lock timeout for Order {order_id}")

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting Order {order_id}")

        return result

    def get_all_orders(self) -> list[dict[str, Any]]:
        """Every exported row, oldest export first."""
        if not self.path.exists():
            return []

        try:
            df = pd.read_excel(self.path, engine="openpyxl")
            return df.to_dict("records")
        except Exception as e:
            logger.error(f"Error reading order history: {e}")
            return []

    def clear_all(self) -> bool:
        """Delete the workbook and its lock file."""
        try:
            for f in (self.path, self.lock_path):
                if f.exists():
                    f.unlink()
            logger.info("Order history cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing order history: {e}")
            return False
