"""Widget library for the Textual UI."""

from __future__ import annotations

from .query_input import QueryInput
from .result_log import NO_RESULTS_MESSAGE, ResultBlock, ResultLog
from .status_bar import StatusBar

__all__ = ["NO_RESULTS_MESSAGE", "QueryInput", "ResultBlock", "ResultLog", "StatusBar"]
