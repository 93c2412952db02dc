"""
Evaluations API
===============

Individual assessment evaluations recorded by a scan.

Endpoints
---------
GET /reports/{report_id}/download      → all evaluations as CSV (streamed)
GET /reports/{report_id}/evaluations   → list evaluations (paginated)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from scc_results.api.core.codec import BinaryStream, opt_any, opt_int, opt_model, opt_model_list, opt_str
from scc_results.api.core.context import RequestContext
from scc_results.api.core.debugging_requests import DetailedResponse
from scc_results.api.core.operations import CSV_MEDIA_TYPE, OperationSpec
from scc_results.api.core.pagination import Pager
from scc_results.api.core.service import BaseService
from scc_results.api.shared import Assessment, PageHRef, Paginated, require_page_envelope

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Property:
    """
    One evaluated property. `expected_value` and `found_value` hold whatever
    JSON value the service reported.
    """

    property: Optional[str] = None
    property_description: Optional[str] = None
    operator: Optional[str] = None
    expected_value: Any = None
    found_value: Any = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Property":
        return cls(
            property=opt_str(d, "property"),
            property_description=opt_str(d, "property_description"),
            operator=opt_str(d, "operator"),
            expected_value=opt_any(d, "expected_value"),
            found_value=opt_any(d, "found_value"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class EvalDetails:
    properties: Optional[List[Property]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EvalDetails":
        return cls(properties=opt_model_list(d, "properties", Property), raw=dict(d))


@dataclass(frozen=True)
class Target:
    """The evaluated resource."""

    id: Optional[str] = None
    account_id: Optional[str] = None
    resource_crn: Optional[str] = None
    resource_name: Optional[str] = None
    service_name: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Target":
        return cls(
            id=opt_str(d, "id"),
            account_id=opt_str(d, "account_id"),
            resource_crn=opt_str(d, "resource_crn"),
            resource_name=opt_str(d, "resource_name"),
            service_name=opt_str(d, "service_name"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class Evaluation:
    """`status` is one of EvaluationStatus' values."""

    home_account_id: Optional[str] = None
    report_id: Optional[str] = None
    control_id: Optional[str] = None
    component_id: Optional[str] = None
    assessment: Optional[Assessment] = None
    evaluate_time: Optional[str] = None
    target: Optional[Target] = None
    status: Optional[str] = None
    reason: Optional[str] = None
    details: Optional[EvalDetails] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Evaluation":
        return cls(
            home_account_id=opt_str(d, "home_account_id"),
            report_id=opt_str(d, "report_id"),
            control_id=opt_str(d, "control_id"),
            component_id=opt_str(d, "component_id"),
            assessment=opt_model(d, "assessment", Assessment),
            evaluate_time=opt_str(d, "evaluate_time"),
            target=opt_model(d, "target", Target),
            status=opt_str(d, "status"),
            reason=opt_str(d, "reason"),
            details=opt_model(d, "details", EvalDetails),
            raw=dict(d),
        )


@dataclass(frozen=True)
class EvaluationPage(Paginated):
    total_count: Optional[int] = None
    limit: Optional[int] = None
    start: Optional[str] = None
    first: Optional[PageHRef] = None
    next: Optional[PageHRef] = None
    home_account_id: Optional[str] = None
    report_id: Optional[str] = None
    evaluations: Optional[List[Evaluation]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EvaluationPage":
        require_page_envelope(d)
        return cls(
            total_count=opt_int(d, "total_count"),
            limit=opt_int(d, "limit"),
            start=opt_str(d, "start"),
            first=opt_model(d, "first", PageHRef),
            next=opt_model(d, "next", PageHRef),
            home_account_id=opt_str(d, "home_account_id"),
            report_id=opt_str(d, "report_id"),
            evaluations=opt_model_list(d, "evaluations", Evaluation),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Option bundles
# ───────────────────────────────────────────────────────────────

@dataclass
class GetReportEvaluationOptions:
    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    exclude_summary: Optional[bool] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class ListReportEvaluationsOptions:
    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    assessment_id: Optional[str] = None
    component_id: Optional[str] = None
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    status: Optional[str] = None
    start: Optional[str] = None
    limit: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)


# ───────────────────────────────────────────────────────────────
# Operation descriptors
# ───────────────────────────────────────────────────────────────

GET_REPORT_EVALUATION = OperationSpec(
    operation_id="GetReportEvaluation",
    options_name="get_report_evaluation_options",
    path="/reports/{report_id}/download",
    path_params=("report_id",),
    query_params=("exclude_summary",),
    accept=CSV_MEDIA_TYPE,
)

LIST_REPORT_EVALUATIONS = OperationSpec(
    operation_id="ListReportEvaluations",
    options_name="list_report_evaluations_options",
    path="/reports/{report_id}/evaluations",
    path_params=("report_id",),
    query_params=(
        "assessment_id",
        "component_id",
        "target_id",
        "target_name",
        "status",
        "start",
        "limit",
    ),
    decoder=EvaluationPage.from_dict,
)


# ───────────────────────────────────────────────────────────────
# EvaluationsMixin
# ───────────────────────────────────────────────────────────────

class EvaluationsMixin:
    """
    High-level wrapper for evaluations:

        client.get_report_evaluation(...)        # CSV download
        client.list_report_evaluations(...)
        client.new_report_evaluations_pager(...)

    Assumes `self._service` is a BaseService instance.
    """

    _service: BaseService

    def get_report_evaluation_with_context(
        self,
        options: Optional[GetReportEvaluationOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[BinaryStream], DetailedResponse]:
        """
        Download the evaluations of a report as CSV.

        The result is a single-use BinaryStream over the response body; the
        caller must read and close it (it also works as a context manager).
        An empty body yields None.
        """
        return self._service.invoke(GET_REPORT_EVALUATION, options, context)

    def get_report_evaluation(
        self, options: Optional[GetReportEvaluationOptions]
    ) -> Tuple[Optional[BinaryStream], DetailedResponse]:
        return self.get_report_evaluation_with_context(options)

    def list_report_evaluations_with_context(
        self,
        options: Optional[ListReportEvaluationsOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[EvaluationPage], DetailedResponse]:
        return self._service.invoke(LIST_REPORT_EVALUATIONS, options, context)

    def list_report_evaluations(
        self, options: Optional[ListReportEvaluationsOptions]
    ) -> Tuple[Optional[EvaluationPage], DetailedResponse]:
        return self.list_report_evaluations_with_context(options)

    def new_report_evaluations_pager(self, options: ListReportEvaluationsOptions) -> Pager[Evaluation]:
        def list_page(
            page_options: ListReportEvaluationsOptions, context: Optional[RequestContext]
        ) -> Tuple[List[Evaluation], Optional[str]]:
            result, _ = self.list_report_evaluations_with_context(page_options, context)
            if result is None:
                return [], None
            return list(result.evaluations or []), result.get_next_href()

        return Pager(list_page, options)


__all__ = [
    "EvalDetails",
    "Evaluation",
    "EvaluationPage",
    "EvaluationsMixin",
    "GetReportEvaluationOptions",
    "ListReportEvaluationsOptions",
    "Property",
    "Target",
]
