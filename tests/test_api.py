from app.demo_data import standard_board_config


# =============================================================================
# CHECKOUT & TRACKER
# =============================================================================

def test_checkout_creates_pending_order(client):
    response = client.post(
        "/api/restaurants/r-1/checkout",
        json={"items": [
            {"menuItemId": "mit-101", "name": "Classic Cheeseburger", "price": 8.99, "quantity": 2},
        ]},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    order = data["order"]
    assert order["status"] == "pending"
    assert order["version"] == 1
    assert order["subtotal"] == 17.98
    assert order["taxes"] == 1.44
    assert order["deliveryFee"] == 5.0
    assert order["total"] == 24.42
    assert order["orderTime"] == order["lastUpdateTime"]
    assert order["items"][0]["menuItemId"] == "mit-101"

    # pending ORD-123, accepted ORD-126 and in-progress ORD-124 are ahead
    tracker = client.get(f"/api/orders/{order['id']}/tracker").json()
    assert tracker["ordersAhead"] == 3
    assert tracker["estimatedMinutes"] == 28
    assert tracker["finished"] is False
    assert tracker["dismissAfterSeconds"] is None


def test_checkout_sums_every_line(client):
    response = client.post(
        "/api/restaurants/r-1/checkout",
        json={"items": [
            {"menuItemId": "mit-101", "name": "Classic Cheeseburger", "price": 8.99, "quantity": 2},
            {"name": "Crispy Fries", "price": 3.5, "quantity": 3},
        ]},
    )

    order = response.json()["order"]
    assert order["subtotal"] == 28.48
    assert order["taxes"] == 2.28
    assert order["total"] == 35.76


def test_checkout_validation(client):
    assert client.post("/api/restaurants/r-1/checkout", json={"items": []}).status_code == 422
    response = client.post(
        "/api/restaurants/r-404/checkout",
        json={"items": [{"name": "Fries", "price": 3.5, "quantity": 1}]},
    )
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_tracker_for_earliest_and_finished_orders(client):
    earliest = client.get("/api/orders/ORD-124/tracker").json()
    assert earliest["ordersAhead"] == 0
    assert earliest["estimatedMinutes"] == 7
    assert earliest["statusLabel"] == "In Progress"

    completed = client.get("/api/orders/ORD-127/tracker").json()
    assert completed["finished"] is True
    assert completed["completionTime"] == 20
    assert completed["dismissAfterSeconds"] == 8
    assert completed["ordersAhead"] is None

    rejected = client.get("/api/orders/ORD-130/tracker").json()
    assert rejected["rejectionReason"] == "Restaurant is too busy to accept new orders."

    assert client.get("/api/orders/ORD-404/tracker").status_code == 404


def test_list_orders(client):
    data = client.get("/api/orders", params={"restaurantId": "r-2"}).json()
    assert data["total"] == 2
    assert [o["id"] for o in data["orders"]] == ["ORD-125", "ORD-128"]

    completed = client.get("/api/orders", params={"restaurantId": "r-1", "status": "completed"}).json()
    assert {o["id"] for o in completed["orders"]} == {"ORD-127", "ORD-129"}

    page = client.get("/api/orders", params={"limit": 3, "skip": 1}).json()
    assert page["total"] == 8
    assert len(page["orders"]) == 3


# =============================================================================
# BOARD
# =============================================================================

def test_board_requires_staff(client):
    assert client.get("/api/restaurants/r-1/board").status_code == 401
    assert client.get("/api/restaurants/r-1/board", headers={"X-User-Id": "u-404"}).status_code == 401
    response = client.get("/api/restaurants/r-1/board", headers={"X-User-Id": "u-6"})
    assert response.status_code == 403
    assert response.json()["success"] is False


def test_board_columns_and_cards(client, staff):
    board = client.get("/api/restaurants/r-1/board", headers=staff).json()

    assert [c["id"] for c in board["columns"]] == ["col-1", "col-2", "col-3"]
    assert [card["order"]["id"] for card in board["columns"][1]["orders"]] == ["ORD-124", "ORD-126"]
    assert board["columns"][1]["statusIds"] == ["accepted", "in-progress"]
    assert len(board["rejectionReasons"]) == 3

    pending_card = board["columns"][0]["orders"][0]
    assert pending_card["order"]["id"] == "ORD-123"
    assert [a["targetStatusId"] for a in pending_card["actions"]] == ["accepted", "rejected"]
    assert pending_card["actions"][1]["requiresReason"] is True


def test_board_finished_columns(client, staff):
    board = client.get(
        "/api/restaurants/r-1/board",
        params={"showCompleted": True, "showRejected": True},
        headers=staff,
    ).json()

    completed, rejected = board["columns"][-2:]
    assert completed["synthetic"] and rejected["synthetic"]
    assert [card["order"]["id"] for card in completed["orders"]] == ["ORD-129", "ORD-127"]
    assert [card["order"]["id"] for card in rejected["orders"]] == ["ORD-130"]
    assert completed["orders"][0]["actions"] == []


# =============================================================================
# TRANSITIONS
# =============================================================================

def transition(client, staff, order_id, **body):
    return client.post(f"/api/orders/{order_id}/transition", json=body, headers=staff)


def test_forward_transition(client, staff):
    response = transition(client, staff, "ORD-123", targetStatusId="accepted", expectedVersion=1)

    assert response.status_code == 200
    data = response.json()
    assert data["applied"] is True
    assert data["decision"]["kind"] == "allowed"
    assert data["order"]["status"] == "accepted"
    assert data["order"]["version"] == 2
    assert data["order"]["processedByUserId"] == "u-5"

    # Same move again is a no-op
    again = transition(client, staff, "ORD-123", targetStatusId="accepted")
    assert again.status_code == 422
    assert again.json()["error"] == "TransitionDenied"
    assert client.get("/api/orders/ORD-123").json()["version"] == 2


def test_transition_requires_staff(client):
    response = client.post(
        "/api/orders/ORD-123/transition",
        json={"targetStatusId": "accepted"},
        headers={"X-User-Id": "u-6"},
    )
    assert response.status_code == 403


def test_stale_version_conflicts(client, staff):
    response = transition(client, staff, "ORD-126", targetStatusId="in-progress", expectedVersion=7)

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["expectedVersion"] == 7
    assert detail["actualVersion"] == 1


def test_backward_transition_needs_force(client, staff):
    response = transition(client, staff, "ORD-124", targetStatusId="pending")
    assert response.status_code == 422
    assert response.json()["error"] == "ConfirmationRequiredError"

    forced = transition(client, staff, "ORD-124", targetStatusId="pending", force=True)
    assert forced.status_code == 200
    assert forced.json()["decision"]["kind"] == "requires_confirmation"
    assert forced.json()["order"]["status"] == "pending"


def test_reject_via_transition(client, staff):
    missing = transition(client, staff, "ORD-123", targetStatusId="rejected")
    assert missing.status_code == 422
    assert missing.json()["error"] == "MissingReasonError"

    response = transition(client, staff, "ORD-123", targetStatusId="rejected", reasonId="reason-2")
    assert response.status_code == 200
    assert response.json()["order"]["rejectionReason"] == "One or more items are out of stock."


def test_unknown_ids(client, staff):
    assert transition(client, staff, "ORD-123", targetStatusId="teleported").status_code == 422
    assert transition(client, staff, "ORD-404", targetStatusId="accepted").status_code == 404


def test_completing_stamps_completion_time(client, staff):
    response = transition(client, staff, "ORD-125", targetStatusId="completed")

    assert response.status_code == 200
    order = response.json()["order"]
    assert order["status"] == "completed"
    assert order["completionTime"] == 15


# =============================================================================
# DRAG AND DROP
# =============================================================================

def drop(client, staff, order_id, **body):
    return client.post(f"/api/orders/{order_id}/drop", json=body, headers=staff)


def test_drop_forward(client, staff):
    data = drop(client, staff, "ORD-123", columnId="col-2").json()

    assert data["applied"] is True
    assert data["order"]["status"] == "accepted"


def test_drop_backward_asks_first(client, staff):
    asked = drop(client, staff, "ORD-124", columnId="col-1")
    assert asked.status_code == 200
    assert asked.json()["applied"] is False
    assert asked.json()["decision"]["kind"] == "requires_confirmation"
    assert asked.json()["order"]["status"] == "in-progress"

    confirmed = drop(client, staff, "ORD-124", columnId="col-1", force=True).json()
    assert confirmed["applied"] is True
    assert confirmed["order"]["status"] == "pending"


def test_drop_without_rule_is_denied(client, staff):
    data = drop(client, staff, "ORD-126", columnId="col-3").json()

    assert data["applied"] is False
    assert data["decision"]["kind"] == "denied"
    assert data["order"]["version"] == 1


def test_drop_on_rejected_column(client, staff):
    asked = drop(client, staff, "ORD-126", columnId="col-rejected").json()
    assert asked["applied"] is False
    assert asked["decision"]["kind"] == "requires_reason"

    done = drop(client, staff, "ORD-126", columnId="col-rejected", reason="Grill is down").json()
    assert done["applied"] is True
    assert done["order"]["rejectionReason"] == "Grill is down"


def test_drop_on_unknown_column(client, staff):
    assert drop(client, staff, "ORD-123", columnId="col-99").status_code == 422


def test_reject_endpoint(client, staff):
    assert client.post("/api/orders/ORD-126/reject", json={}, headers=staff).status_code == 422

    response = client.post("/api/orders/ORD-126/reject", json={"reason": "Out of stock"}, headers=staff)
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    assert response.json()["rejectionReason"] == "Out of stock"

    # Already final
    assert client.post("/api/orders/ORD-126/reject", json={"reasonId": "reason-1"}, headers=staff).status_code == 422


# =============================================================================
# BOARD TEMPLATES & CATALOG
# =============================================================================

def test_validate_endpoint_lists_every_problem(client):
    config = standard_board_config()
    config["columns"][0]["statusIds"].append("ghost")
    config["statusTransitions"]["ghost"] = ["pending"]

    data = client.post("/api/board-templates/validate", json=config).json()

    assert data["valid"] is False
    assert [e["code"] for e in data["errors"]] == ["unknown_status", "unknown_status"]


def test_invalid_board_template_is_not_saved(client):
    config = standard_board_config()
    config["statusTransitions"]["pending"].append("nowhere")

    response = client.post("/api/board-templates", json={"vendorId": "v-1", "name": "Broken", "config": config})

    assert response.status_code == 422
    assert response.json()["error"] == "Invalid board config"
    assert response.json()["detail"][0]["path"] == "statusTransitions.pending[2]"
    assert len(client.get("/api/board-templates", params={"vendorId": "v-1"}).json()) == 1


def test_board_template_lifecycle(client, staff):
    created = client.post(
        "/api/board-templates",
        json={"vendorId": "v-1", "name": "Late Night", "config": standard_board_config()},
    )
    assert created.status_code == 201
    template_id = created.json()["id"]

    assigned = client.put("/api/restaurants/r-1", json={"boardTemplateId": template_id})
    assert assigned.json()["boardTemplateId"] == template_id

    assert client.delete(f"/api/board-templates/{template_id}").status_code == 204
    assert client.get("/api/restaurants/r-1").json()["boardTemplateId"] is None
    assert client.get("/api/restaurants/r-1/board", headers=staff).status_code == 404


def test_vendor_signup_and_duplicate_username(client):
    created = client.post("/api/vendors", json={"name": "Taco Town", "adminUsername": "vendor3"})
    assert created.status_code == 201
    assert created.json()["admin"]["role"] == "Vendor"
    assert created.json()["admin"]["vendorId"] == created.json()["vendor"]["id"]

    duplicate = client.post("/api/vendors", json={"name": "Copycat", "adminUsername": "vendor3"})
    assert duplicate.status_code == 409


def test_menu_item_delete_cleans_sections(client):
    assert client.delete("/api/menu-item-templates/mit-104").status_code == 204

    menus = client.get("/api/menu-templates", params={"vendorId": "v-1"}).json()
    assert menus[0]["sections"][1]["itemIds"] == []
