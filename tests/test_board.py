from app.services.workflow import available_actions, build_board


def card_ids(view):
    return [card.order.id for card in view.cards]


def test_orders_land_in_their_column(board_config, make_order):
    orders = [
        make_order("o-new", "pending", minutes_ago=1),
        make_order("o-cooking", "in-progress", minutes_ago=9),
        make_order("o-accepted", "accepted", minutes_ago=4),
        make_order("o-ready", "ready-for-pickup", minutes_ago=20),
        make_order("o-done", "completed", minutes_ago=30),
        make_order("o-rejected", "rejected", minutes_ago=2),
    ]

    views = build_board(orders, board_config)

    assert [v.column.id for v in views] == ["col-1", "col-2", "col-3"]
    assert card_ids(views[0]) == ["o-new"]
    # Oldest first
    assert card_ids(views[1]) == ["o-cooking", "o-accepted"]
    assert card_ids(views[2]) == ["o-ready"]


def test_finished_columns_are_toggled(board_config, make_order):
    orders = [
        make_order("o-done-late", "completed", minutes_ago=5),
        make_order("o-done-early", "completed", minutes_ago=50),
        make_order("o-rejected", "rejected", minutes_ago=2),
    ]

    only_completed = build_board(orders, board_config, show_completed=True)
    both = build_board(orders, board_config, show_completed=True, show_rejected=True)

    assert [v.column.id for v in only_completed] == ["col-1", "col-2", "col-3", "col-completed"]
    assert only_completed[-1].synthetic
    assert card_ids(only_completed[-1]) == ["o-done-early", "o-done-late"]

    assert [v.column.id for v in both][-2:] == ["col-completed", "col-rejected"]
    assert card_ids(both[-1]) == ["o-rejected"]


def test_status_in_two_columns_shows_once(board_config, make_order):
    board_config.columns[2].status_ids.append("in-progress")

    views = build_board([make_order("o-1", "in-progress")], board_config)

    assert card_ids(views[1]) == ["o-1"]
    assert card_ids(views[2]) == []


def test_actions_follow_transition_table(board_config, make_order):
    actions = available_actions(make_order("o-1", "pending"), board_config)

    assert [a.target_status_id for a in actions] == ["accepted", "rejected"]
    assert actions[0].label == "Accepted"
    assert actions[0].color == "#3b82f6"
    assert not actions[0].requires_reason
    assert actions[1].requires_reason


def test_reject_is_offered_to_every_open_order(board_config, make_order):
    actions = available_actions(make_order("o-1", "in-progress"), board_config)

    assert [a.target_status_id for a in actions] == ["ready-for-pickup", "rejected"]
    assert actions[-1].to_dict() == {
        "targetStatusId": "rejected",
        "label": "Rejected",
        "color": "#ef4444",
        "requiresReason": True,
    }


def test_finished_orders_have_no_actions(board_config, make_order):
    assert available_actions(make_order("o-1", "completed"), board_config) == []
    assert available_actions(make_order("o-2", "rejected"), board_config) == []
    assert available_actions(make_order("o-3", "legacy"), board_config) == []


def test_labels_fall_back_to_status_id(mini_config, make_order):
    mini_config.status_transitions["accepted"] = ["out-for-delivery"]

    actions = available_actions(make_order("o-1", "accepted"), mini_config)

    assert actions[0].label == "Out For Delivery"
    assert actions[0].color is None
