import json
import logging
from finerp.core.logging_config import JsonFormatter, get_logging_config

def test_json_formatter_includes_extras():
    record = logging.LogRecord("finerp.api.sales", logging.INFO, __file__, 1, "Invoice created", (), None)
    record.tenant_id = "t1"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "finerp.api.sales"
    assert payload["message"] == "Invoice created"
    assert payload["tenant_id"] == "t1"

def test_logging_config_selects_formatter():
    assert get_logging_config("debug", "json")["handlers"]["console"]["formatter"] == "json"
    config = get_logging_config("info", "console")
    assert config["handlers"]["console"]["formatter"] == "console"
    assert config["loggers"]["finerp"]["level"] == "INFO"
