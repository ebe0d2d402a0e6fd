import json
import logging

from config.logging import JsonFormatter, SamplingFilter


def make_record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord("manicvanity.orders", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extra_fields():
    record = make_record("order_status_changed", event="order_status_changed", order_id=7, obj=object())

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["name"] == "manicvanity.orders"
    assert payload["message"] == "order_status_changed"
    assert payload["order_id"] == 7
    assert isinstance(payload["obj"], str)
    assert payload["time"].endswith("Z")


def test_json_formatter_expands_dict_messages():
    payload = json.loads(JsonFormatter().format(make_record({"action": "signin", "status": "success"})))
    assert payload["action"] == "signin"
    assert "message" not in payload


def test_sampling_filter_keeps_allowlisted_events_and_other_levels():
    sampler = SamplingFilter(rate=0.0, levels=["INFO"], allow_events=["order_status_changed"])

    assert sampler.filter(make_record("order_status_changed")) is True
    assert sampler.filter(make_record("cart.item_added")) is False
    assert sampler.filter(make_record("insufficient_stock", level=logging.WARNING)) is True
