"""
Excel Sales Report Manager with Concurrency Control

Thread-safe Excel operations for daily sales reports. One workbook per
day, with sheets:
- Summary
- Top Products
- Hourly
- Orders

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Union

import pandas as pd
from filelock import FileLock, Timeout

from bistro.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

DATA_DIR = Path(settings.data_directory)
REPORT_PREFIX = "sales-report-"


class ExcelManager:
    """Thread-safe Excel file manager."""

    LOCK_TIMEOUT = settings.excel_lock_timeout

    SUMMARY_SHEET = "Summary"
    TOP_PRODUCTS_SHEET = "Top Products"
    HOURLY_SHEET = "Hourly"
    ORDERS_SHEET = "Orders"

    TOP_PRODUCT_COLUMNS = ["rank", "name", "quantity", "revenue"]
    HOURLY_COLUMNS = ["hour", "orders", "revenue"]
    ORDER_COLUMNS = [
        "order_id",
        "time",
        "order_type",
        "table_number",
        "items",
        "total",
    ]

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Create data directory if needed."""
        if not DATA_DIR.exists():
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {DATA_DIR}")

    @classmethod
    def report_path(cls, day: Union[date, str]) -> Path:
        """Workbook path for a given day."""
        day_str = day.isoformat() if isinstance(day, date) else day
        return DATA_DIR / f"{REPORT_PREFIX}{day_str}.xlsx"

    @classmethod
    def _lock_path(cls, day: Union[date, str]) -> Path:
        path = cls.report_path(day)
        return path.with_name(path.name + ".lock")

    @staticmethod
    def _format_items(items: list[dict[str, Any]]) -> str:
        return ", ".join(
            f"{item['quantity']}x {item['product_name']}" for item in items
        )

    @classmethod
    def _build_frames(cls, report_data: dict[str, Any], exported_at: str) -> dict[str, pd.DataFrame]:
        stats = report_data["statistics"]
        summary = pd.DataFrame(
            [
                ("Restaurant", settings.restaurant_name),
                ("Date", report_data["date"]),
                ("Generated", exported_at),
                ("Currency", settings.currency),
                ("Total Revenue", stats["total_revenue"]),
                ("Total Orders", stats["total_orders"]),
                ("Average Order Value", stats["average_order_value"]),
                ("Dine-In Orders", stats["dine_in_orders"]),
                ("Takeaway Orders", stats["takeaway_orders"]),
            ],
            columns=["metric", "value"],
        )

        top_products = pd.DataFrame(
            [
                {"rank": rank, **product}
                for rank, product in enumerate(report_data["top_products"], start=1)
            ],
            columns=cls.TOP_PRODUCT_COLUMNS,
        )

        hourly = pd.DataFrame(report_data["hourly_breakdown"], columns=cls.HOURLY_COLUMNS)

        orders = pd.DataFrame(
            [
                {
                    "order_id": order["id"],
                    "time": datetime.fromisoformat(order["created_at"]).strftime("%H:%M:%S"),
                    "order_type": order["order_type"].replace("_", " "),
                    "table_number": order.get("table_number") or "N/A",
                    "items": cls._format_items(order["items"]),
                    "total": order["total"],
                }
                for order in report_data["orders"]
            ],
            columns=cls.ORDER_COLUMNS,
        )

        return {
            cls.SUMMARY_SHEET: summary,
            cls.TOP_PRODUCTS_SHEET: top_products,
            cls.HOURLY_SHEET: hourly,
            cls.ORDERS_SHEET: orders,
        }

    @classmethod
    def export_sales_report(cls, report_data: dict[str, Any]) -> dict[str, Any]:
        """
        Write a daily sales report workbook with file locking.

        Args:
            report_data: DailySalesReport.to_dict() output

        Returns:
            Result dict with success flag, message, path and export time.
            Lock timeouts and write errors are reported here, not raised.
        """
        cls._ensure_data_dir()

        day = report_data.get("date", "unknown")
        path = cls.report_path(day)
        result = {
            "success": False,
            "message": "",
            "date": day,
            "path": str(path),
            "exported_at": None,
        }

        try:
            lock = FileLock(str(cls._lock_path(day)), timeout=cls.LOCK_TIMEOUT)

            with lock:
                logger.debug(f"Lock acquired for report {day}")

                export_time = datetime.now().isoformat()
                frames = cls._build_frames(report_data, export_time)

                with pd.ExcelWriter(str(path), engine="openpyxl") as writer:
                    for sheet_name, frame in frames.items():
                        frame.to_excel(writer, sheet_name=sheet_name, index=False)

                logger.info(
                    f"Sales report {day} exported to Excel "
                    f"({len(report_data['orders'])} orders)"
                )

                result["success"] = True
                result["message"] = f"Sales report {day} exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for report {day}")

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error(f"Lock timeout for report {day}")

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting report {day}")

        return result

    @classmethod
    def load_sales_report(cls, day: Union[date, str]) -> dict[str, pd.DataFrame]:
        """
        Read an exported workbook back.

        Returns:
            Mapping of sheet name to DataFrame, empty if no report exists
        """
        path = cls.report_path(day)
        if not path.exists():
            return {}

        try:
            return pd.read_excel(path, sheet_name=None, engine="openpyxl", keep_default_na=False)
        except Exception as e:
            logger.error(f"Error reading {path}: {e}")
            return {}

    @classmethod
    def list_reports(cls) -> list[Path]:
        """All exported report workbooks, oldest day first."""
        if not DATA_DIR.exists():
            return []
        return sorted(DATA_DIR.glob(f"{REPORT_PREFIX}*.xlsx"))

    @classmethod
    def clear_all(cls) -> bool:
        """Delete all exported reports and their lock files."""
        try:
            if DATA_DIR.exists():
                for f in DATA_DIR.glob(f"{REPORT_PREFIX}*.xlsx*"):
                    f.unlink()
            logger.info("All sales reports cleared")
            return True
        except Exception as e:
            logger.error(f"Error clearing reports: {e}")
            return False
