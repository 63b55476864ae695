import json
import logging

from catalog_hub.core.logging import (
    ContextFilter,
    StructuredLogFormatter,
    correlation_id,
    get_logger,
    provider,
    set_correlation_id,
    set_provider,
)


def _record(message="catalog read", data=None):
    record = logging.LogRecord("catalog_hub.test", logging.WARNING, __file__, 1, message, None, None)
    if data is not None:
        record.data = data
    return record


def test_structured_records_carry_request_and_partner_context():
    corr_token = correlation_id.set("")
    provider_token = provider.set("")
    try:
        set_correlation_id("req-42")
        set_provider("cde")
        record = _record(data={"error_code": "upstream"})
        ContextFilter().filter(record)

        entry = json.loads(StructuredLogFormatter().format(record))
    finally:
        correlation_id.reset(corr_token)
        provider.reset(provider_token)

    assert entry["message"] == "catalog read"
    assert entry["correlation_id"] == "req-42"
    assert entry["provider"] == "cde"
    assert entry["error_code"] == "upstream"


def test_empty_context_is_omitted():
    corr_token = correlation_id.set("")
    provider_token = provider.set("")
    try:
        entry = json.loads(StructuredLogFormatter().format(_record()))
    finally:
        correlation_id.reset(corr_token)
        provider.reset(provider_token)

    assert "correlation_id" not in entry
    assert "provider" not in entry


def test_generated_correlation_id_and_plain_logger():
    token = correlation_id.set("")
    try:
        generated = set_correlation_id()
        assert correlation_id.get() == generated
    finally:
        correlation_id.reset(token)

    assert get_logger("catalog_hub.x") is logging.getLogger("catalog_hub.x")
