from unittest.mock import patch

from leadcrawl.core.error_handler import ErrorHandler
from leadcrawl.core.errors import EmptyPage, FetchFailed


@patch("leadcrawl.core.error_handler.logger")
def test_record_formats_and_logs_once(mock_logger):
    line = ErrorHandler.record(EmptyPage("https://dir.example.com/p1", 12), context="page 1")

    assert line == "page 1 | EmptyPage: https://dir.example.com/p1 returned insufficient content (12 chars)"
    mock_logger.warning.assert_called_once_with(line)


@patch("leadcrawl.core.error_handler.logger")
def test_record_without_context(mock_logger):
    line = ErrorHandler.record(FetchFailed("https://acme.test", ["direct"]))

    assert line.startswith("FetchFailed: could not fetch https://acme.test")
    assert "direct" in line
