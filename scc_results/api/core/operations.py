"""
Operation descriptors
=====================

Each service operation is declared once as an `OperationSpec`:

    GET_REPORT = OperationSpec(
        operation_id="GetReport",
        options_name="get_report_options",
        path="/reports/{report_id}",
        path_params=("report_id",),
        decoder=Report.from_dict,
    )

The service core turns a descriptor plus an option bundle into a request:
path parameters and query parameters are read from the bundle attributes of
the same name, in the order the descriptor lists them, and unset (None) attributes
are left out of the request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from scc_results.api.core.errors import ValidationError
from scc_results.api.core.request_builder import GET

JSON_MEDIA_TYPE = "application/json"
CSV_MEDIA_TYPE = "application/csv"

Decoder = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class OperationSpec:
    operation_id: str
    options_name: str
    path: str
    method: str = GET
    path_params: Tuple[str, ...] = ()
    query_params: Tuple[str, ...] = ()
    accept: str = JSON_MEDIA_TYPE
    # None means the body is surfaced as a BinaryStream
    decoder: Optional[Decoder] = None


def validate_options(spec: OperationSpec, options: Any) -> Dict[str, str]:
    """
    Check the option bundle and return the path parameter values.

    Raises:
        ValidationError: the bundle is None or a required path parameter is
            missing or empty.
    """
    if options is None:
        raise ValidationError(f"{spec.options_name} cannot be None")
    values: Dict[str, str] = {}
    for name in spec.path_params:
        value = getattr(options, name, None)
        if value is None or value == "":
            raise ValidationError(f"{name} is required")
        values[name] = str(value)
    return values


def query_values(spec: OperationSpec, options: Any) -> List[Tuple[str, Any]]:
    """Set query parameters of `options`, in descriptor order."""
    pairs: List[Tuple[str, Any]] = []
    for name in spec.query_params:
        value = getattr(options, name, None)
        if value is not None:
            pairs.append((name, value))
    return pairs


__all__ = [
    "CSV_MEDIA_TYPE",
    "JSON_MEDIA_TYPE",
    "OperationSpec",
    "query_values",
    "validate_options",
]
