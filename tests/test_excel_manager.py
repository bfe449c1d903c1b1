import json
from dataclasses import replace

import pytest

from app import tasks
from app.services.excel_manager import ExcelManager


@pytest.fixture
def manager(tmp_path):
    return ExcelManager(directory=tmp_path / "data", filename="history.xlsx", lock_timeout=5)


@pytest.fixture
def finished_order(make_order):
    return replace(
        make_order("ORD-DONE", "completed", minutes_ago=18),
        completion_time=18,
        processed_by_user_id="u-5",
        version=5,
    )


def test_export_creates_workbook(manager, finished_order):
    result = manager.export_order(finished_order.to_dict())

    assert result["success"] is True
    assert result["order_id"] == "ORD-DONE"
    assert manager.path.exists()

    rows = manager.get_all_orders()
    assert len(rows) == 1
    assert rows[0]["order_id"] == "ORD-DONE"
    assert rows[0]["status"] == "completed"
    assert rows[0]["completion_time"] == 18
    assert json.loads(rows[0]["items"])[0]["name"] == "Classic Cheeseburger"
    assert list(rows[0].keys()) == ExcelManager.ORDER_COLUMNS


def test_re_export_replaces_row(manager, finished_order, make_order):
    manager.export_order(finished_order.to_dict())
    manager.export_order(replace(finished_order, processed_by_user_id="u-2").to_dict())

    rejected = replace(make_order("ORD-NOPE", "rejected"), rejection_reason="Out of stock")
    manager.export_order(rejected.to_dict())

    rows = manager.get_all_orders()
    assert [r["order_id"] for r in rows] == ["ORD-DONE", "ORD-NOPE"]
    assert rows[0]["processed_by_user_id"] == "u-2"
    assert rows[1]["rejection_reason"] == "Out of stock"


def test_clear_all(manager, finished_order):
    manager.export_order(finished_order.to_dict())

    assert manager.clear_all() is True
    assert not manager.path.exists()
    assert manager.get_all_orders() == []


def test_export_task_runs_locally(monkeypatch, manager, finished_order):
    monkeypatch.setattr(tasks, "ExcelManager", lambda: manager)

    result = tasks.export_finished_order.apply(args=[finished_order.to_dict()]).get()

    assert result["success"] is True
    assert "processing_time_seconds" in result
    assert manager.get_all_orders()[0]["order_id"] == "ORD-DONE"


def test_queue_export_survives_broker_outage(monkeypatch, finished_order):
    def broker_down(*args, **kwargs):
        raise ConnectionError("redis is down")

    monkeypatch.setattr(tasks.export_finished_order, "delay", broker_down)

    tasks.queue_order_export(finished_order)
