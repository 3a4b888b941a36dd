import logging

from utils.log_filters import CredentialFilter


def _record(msg, *args):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_masks_bearer_token():
    record = _record("headers: {'Authorization': 'Bearer abc.def-123'}")

    assert CredentialFilter().filter(record) is True
    assert "abc.def-123" not in record.getMessage()
    assert "Bearer ***" in record.getMessage()


def test_masks_openai_key_passed_as_argument():
    record = _record("key=%s", "sk-0123456789abcdef")

    CredentialFilter().filter(record)

    assert record.getMessage() == "key=***"


def test_leaves_plain_messages_alone():
    record = _record("Запрос к модели: %s", "gpt-4")

    CredentialFilter().filter(record)

    assert record.args == ("gpt-4",)
    assert record.getMessage() == "Запрос к модели: gpt-4"
