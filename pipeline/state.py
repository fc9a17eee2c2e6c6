from typing import Any, Dict, Optional, TypedDict


class AnalysisState(TypedDict, total=False):
    """
    Per-request state passed between LangGraph nodes.

    A node that sets `body` ends the run; `status_code` and `body` are
    then sent back to the caller unchanged.
    """

    image: Optional[Any]  # "data:image/png;base64,...", unchecked JSON value

    # Output of the vision call
    raw_response: Optional[str]

    # Parsed upstream JSON, relayed verbatim on success
    result: Optional[Any]

    # Terminal response
    status_code: Optional[int]
    body: Optional[Dict[str, Any]]

    # Error/debugging info
    error: Optional[str]
