import pytest

from core.exceptions import NotFoundError, ValidationError
from modules.orders.enums.order_enums import OrderStatus
from modules.orders.services.order_service import (
    OrderService,
    coerce_number,
    normalize_items,
    normalize_notes,
    normalize_table_number,
    normalize_total_price,
)


class TestNormalization:

    @pytest.mark.parametrize("value,expected", [
        (5, 5), ("5", 5), (" 12 ", 12), (3.0, 3), ("4.0", 4),
    ])
    def test_table_number_coercion(self, value, expected):
        assert normalize_table_number(value) == expected

    @pytest.mark.parametrize("value", [0, -3, "0", "abc", "", None, True, 2.5, [5], "nan"])
    def test_invalid_table_number(self, value):
        with pytest.raises(ValidationError):
            normalize_table_number(value)

    def test_items_are_trimmed_and_filtered(self):
        assert normalize_items([" Soup", "", "  ", None, 7, "Bread "]) == [
            "Soup", "7", "Bread"
        ]

    def test_items_must_be_a_list(self):
        assert normalize_items("Soup") == []
        assert normalize_items(None) == []

    def test_notes(self):
        assert normalize_notes("  extra napkins ") == "extra napkins"
        assert normalize_notes("   ") is None
        assert normalize_notes(None) is None

    @pytest.mark.parametrize("value,expected", [
        (None, 0.0), ("", 0.0), (12, 12.0), ("9.5", 9.5), (0, 0.0),
        (19.999, 20.0), ("4.567", 4.57),
    ])
    def test_total_price(self, value, expected):
        assert normalize_total_price(value) == expected

    @pytest.mark.parametrize("value", [-1, "-0.5", "free", "inf", False])
    def test_invalid_total_price(self, value):
        with pytest.raises(ValidationError):
            normalize_total_price(value)

    def test_coerce_number_rejects_bool(self):
        assert coerce_number(True) is None


class TestPlaceOrder:

    def test_place_order_returns_new_order(self, order_service):
        order = order_service.place_order({"tableNumber": 5, "items": ["Soup", "Bread"]})

        assert order.status == OrderStatus.NEW
        assert order.table_number == 5
        assert order.items == ["Soup", "Bread"]

    def test_place_order_publishes_created_event_with_returned_order(
        self, order_service, mock_broadcaster
    ):
        order = order_service.place_order({
            "tableNumber": "3",
            "items": ["Fish"],
            "notes": " no salt ",
            "totalPrice": "18.25",
        })

        mock_broadcaster.publish.assert_called_once_with(
            "order_created", order.to_payload()
        )
        assert order.notes == "no salt"
        assert order.total_price == 18.25

    def test_place_order_ids_are_unique(self, order_service):
        ids = [
            order_service.place_order({"tableNumber": 1, "items": ["Tea"]}).id
            for _ in range(10)
        ]
        assert len(set(ids)) == 10

    def test_store_commit_happens_before_publish(self, order_service, memory_store, mock_broadcaster):
        seen = []
        mock_broadcaster.publish.side_effect = (
            lambda name, payload: seen.append(memory_store.get(payload["id"]))
        )

        order = order_service.place_order({"tableNumber": 2, "items": ["Soup"]})

        assert seen == [order]

    @pytest.mark.parametrize("data,message", [
        ({"tableNumber": 0, "items": ["Soup"]}, "Invalid tableNumber"),
        ({"tableNumber": 4, "items": []}, "Order must include at least one item"),
        ({"tableNumber": 4, "items": ["  "]}, "Order must include at least one item"),
        ({"items": ["Soup"]}, "Invalid tableNumber"),
        ({"tableNumber": 4, "items": ["Soup"], "totalPrice": -2}, "Invalid totalPrice"),
    ])
    def test_invalid_input_neither_stores_nor_publishes(
        self, order_service, memory_store, mock_broadcaster, data, message
    ):
        with pytest.raises(ValidationError) as exc_info:
            order_service.place_order(data)

        assert exc_info.value.detail == message
        assert memory_store.list() == []
        mock_broadcaster.publish.assert_not_called()


class TestPlaceOrderOnEachStore:

    @pytest.mark.parametrize("table_number", [10 ** 20, 1e300, "100000000000000000000"])
    def test_oversized_table_number_is_rejected(
        self, order_store, mock_broadcaster, table_number
    ):
        service = OrderService(order_store, mock_broadcaster)

        with pytest.raises(ValidationError) as exc_info:
            service.place_order({"tableNumber": table_number, "items": ["Soup"]})

        assert exc_info.value.detail == "Invalid tableNumber"
        assert order_store.list() == []
        mock_broadcaster.publish.assert_not_called()

    def test_price_matches_stored_value(self, order_store, mock_broadcaster):
        service = OrderService(order_store, mock_broadcaster)

        order = service.place_order(
            {"tableNumber": 1, "items": ["Soup"], "totalPrice": 19.999}
        )

        assert order.total_price == 20.0
        assert order_store.get(order.id).total_price == 20.0


class TestChangeStatus:

    @pytest.mark.parametrize("status", ["new", "preparing", "ready"])
    def test_change_status_updates_store(self, order_service, sample_order, status):
        updated = order_service.change_status(sample_order.id, status)

        assert updated.status == OrderStatus(status)
        assert order_service.get_order(sample_order.id).status == OrderStatus(status)

    def test_change_status_trims_input(self, order_service, sample_order):
        assert order_service.change_status(sample_order.id, " ready ").status == OrderStatus.READY

    def test_change_status_publishes_updated_event(
        self, order_service, sample_order, mock_broadcaster
    ):
        updated = order_service.change_status(sample_order.id, "preparing")

        mock_broadcaster.publish.assert_called_once_with(
            "order_updated", updated.to_payload()
        )

    @pytest.mark.parametrize("status,message", [
        (None, "Missing status"),
        ("", "Missing status"),
        ("   ", "Missing status"),
    ])
    def test_missing_status(self, order_service, sample_order, mock_broadcaster, status, message):
        with pytest.raises(ValidationError) as exc_info:
            order_service.change_status(sample_order.id, status)

        assert exc_info.value.detail == message
        mock_broadcaster.publish.assert_not_called()

    def test_unknown_status_leaves_order_unchanged(
        self, order_service, sample_order, mock_broadcaster
    ):
        with pytest.raises(ValidationError):
            order_service.change_status(sample_order.id, "cancelled")

        assert order_service.get_order(sample_order.id).status == OrderStatus.NEW
        mock_broadcaster.publish.assert_not_called()

    def test_unknown_order_publishes_nothing(self, order_service, mock_broadcaster):
        with pytest.raises(NotFoundError):
            order_service.change_status("999", "ready")

        mock_broadcaster.publish.assert_not_called()

    def test_last_write_wins(self, order_service, sample_order):
        order_service.change_status(sample_order.id, "ready")
        order_service.change_status(sample_order.id, "preparing")

        assert order_service.get_order(sample_order.id).status == OrderStatus.PREPARING


class TestReads:

    def test_get_unknown_order(self, order_service):
        with pytest.raises(NotFoundError):
            order_service.get_order("42")

    def test_list_orders(self, order_service):
        first = order_service.place_order({"tableNumber": 1, "items": ["A"]})
        second = order_service.place_order({"tableNumber": 2, "items": ["B"]})

        assert order_service.list_orders() == [second, first]
