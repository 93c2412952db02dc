"""
Reports API
===========

Compliance scan reports and the per-report views that are not controls,
evaluations or resources.

Endpoints
---------
GET /reports/latest                       → latest reports per profile/scope/attachment
GET /reports                              → list reports (paginated)
GET /reports/profiles                     → profiles found in reports
GET /reports/scopes                       → scopes found in reports
GET /reports/{report_id}                  → retrieve a report
GET /reports/{report_id}/summary          → report summary
GET /reports/{report_id}/tags             → report tags
GET /reports/{report_id}/violations_drift → violation counts over time
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from scc_results.api.core.codec import opt_int, opt_model, opt_model_list, opt_str
from scc_results.api.core.context import RequestContext
from scc_results.api.core.debugging_requests import DetailedResponse
from scc_results.api.core.operations import OperationSpec
from scc_results.api.core.pagination import Pager
from scc_results.api.core.service import BaseService
from scc_results.api.shared import (
    Account,
    Attachment,
    ComplianceScore,
    ComplianceStats,
    EvalStats,
    PageHRef,
    Paginated,
    Profile,
    Scope,
    Tags,
    require_page_envelope,
)

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Report:
    """
    A single compliance scan. `type` is one of ScanType's values.
    """

    id: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[str] = None
    scan_time: Optional[str] = None
    type: Optional[str] = None
    cos_object: Optional[str] = None
    instance_id: Optional[str] = None
    account: Optional[Account] = None
    profile: Optional[Profile] = None
    scope: Optional[Scope] = None
    attachment: Optional[Attachment] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Report":
        return cls(
            id=opt_str(d, "id"),
            group_id=opt_str(d, "group_id"),
            created_at=opt_str(d, "created_at"),
            scan_time=opt_str(d, "scan_time"),
            type=opt_str(d, "type"),
            cos_object=opt_str(d, "cos_object"),
            instance_id=opt_str(d, "instance_id"),
            account=opt_model(d, "account", Account),
            profile=opt_model(d, "profile", Profile),
            scope=opt_model(d, "scope", Scope),
            attachment=opt_model(d, "attachment", Attachment),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ReportPage(Paginated):
    """A page of reports."""

    total_count: Optional[int] = None
    limit: Optional[int] = None
    start: Optional[str] = None
    first: Optional[PageHRef] = None
    next: Optional[PageHRef] = None
    home_account_id: Optional[str] = None
    reports: Optional[List[Report]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ReportPage":
        require_page_envelope(d)
        return cls(
            total_count=opt_int(d, "total_count"),
            limit=opt_int(d, "limit"),
            start=opt_str(d, "start"),
            first=opt_model(d, "first", PageHRef),
            next=opt_model(d, "next", PageHRef),
            home_account_id=opt_str(d, "home_account_id"),
            reports=opt_model_list(d, "reports", Report),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetLatestReportsResponse:
    home_account_id: Optional[str] = None
    controls_summary: Optional[ComplianceStats] = None
    evaluations_summary: Optional[EvalStats] = None
    score: Optional[ComplianceScore] = None
    reports: Optional[List[Report]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetLatestReportsResponse":
        return cls(
            home_account_id=opt_str(d, "home_account_id"),
            controls_summary=opt_model(d, "controls_summary", ComplianceStats),
            evaluations_summary=opt_model(d, "evaluations_summary", EvalStats),
            score=opt_model(d, "score", ComplianceScore),
            reports=opt_model_list(d, "reports", Report),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetProfilesResponse:
    home_account_id: Optional[str] = None
    profiles: Optional[List[Profile]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetProfilesResponse":
        return cls(
            home_account_id=opt_str(d, "home_account_id"),
            profiles=opt_model_list(d, "profiles", Profile),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetScopesResponse:
    home_account_id: Optional[str] = None
    scopes: Optional[List[Scope]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetScopesResponse":
        return cls(
            home_account_id=opt_str(d, "home_account_id"),
            scopes=opt_model_list(d, "scopes", Scope),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ResourceSummaryItem:
    """One of the top failed resources of a report."""

    name: Optional[str] = None
    id: Optional[str] = None
    service: Optional[str] = None
    tags: Optional[Tags] = None
    account: Optional[str] = None
    status: Optional[str] = None
    total_count: Optional[int] = None
    pass_count: Optional[int] = None
    failure_count: Optional[int] = None
    error_count: Optional[int] = None
    completed_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ResourceSummaryItem":
        return cls(
            name=opt_str(d, "name"),
            id=opt_str(d, "id"),
            service=opt_str(d, "service"),
            tags=opt_model(d, "tags", Tags),
            account=opt_str(d, "account"),
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            pass_count=opt_int(d, "pass_count"),
            failure_count=opt_int(d, "failure_count"),
            error_count=opt_int(d, "error_count"),
            completed_count=opt_int(d, "completed_count"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ResourceSummary:
    status: Optional[str] = None
    total_count: Optional[int] = None
    compliant_count: Optional[int] = None
    not_compliant_count: Optional[int] = None
    unable_to_perform_count: Optional[int] = None
    user_evaluation_required_count: Optional[int] = None
    top_failed: Optional[List[ResourceSummaryItem]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ResourceSummary":
        return cls(
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            compliant_count=opt_int(d, "compliant_count"),
            not_compliant_count=opt_int(d, "not_compliant_count"),
            unable_to_perform_count=opt_int(d, "unable_to_perform_count"),
            user_evaluation_required_count=opt_int(d, "user_evaluation_required_count"),
            top_failed=opt_model_list(d, "top_failed", ResourceSummaryItem),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ReportSummary:
    """
    Summary of a report.

    The service spells the instance id key ``isntance_id``; it is exposed
    here under that exact name.
    """

    report_id: Optional[str] = None
    isntance_id: Optional[str] = None
    account: Optional[Account] = None
    score: Optional[ComplianceScore] = None
    controls: Optional[ComplianceStats] = None
    evaluations: Optional[EvalStats] = None
    resources: Optional[ResourceSummary] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ReportSummary":
        return cls(
            report_id=opt_str(d, "report_id"),
            isntance_id=opt_str(d, "isntance_id"),
            account=opt_model(d, "account", Account),
            score=opt_model(d, "score", ComplianceScore),
            controls=opt_model(d, "controls", ComplianceStats),
            evaluations=opt_model(d, "evaluations", EvalStats),
            resources=opt_model(d, "resources", ResourceSummary),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetTagsResponse:
    report_id: Optional[str] = None
    tags: Optional[Tags] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetTagsResponse":
        return cls(
            report_id=opt_str(d, "report_id"),
            tags=opt_model(d, "tags", Tags),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ReportViolationDataPoint:
    report_id: Optional[str] = None
    report_group_id: Optional[str] = None
    scan_time: Optional[str] = None
    controls: Optional[ComplianceStats] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ReportViolationDataPoint":
        return cls(
            report_id=opt_str(d, "report_id"),
            report_group_id=opt_str(d, "report_group_id"),
            scan_time=opt_str(d, "scan_time"),
            controls=opt_model(d, "controls", ComplianceStats),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetReportViolationsDriftResult:
    home_account_id: Optional[str] = None
    report_id: Optional[str] = None
    data_points: Optional[List[ReportViolationDataPoint]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetReportViolationsDriftResult":
        return cls(
            home_account_id=opt_str(d, "home_account_id"),
            report_id=opt_str(d, "report_id"),
            data_points=opt_model_list(d, "data_points", ReportViolationDataPoint),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Option bundles
# ───────────────────────────────────────────────────────────────

@dataclass
class GetLatestReportsOptions:
    x_correlation_id: Optional[str] = None
    sort: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class ListReportsOptions:
    """`type` takes a ScanType value; `start` is managed by pagers."""

    x_correlation_id: Optional[str] = None
    attachment_id: Optional[str] = None
    group_id: Optional[str] = None
    profile_id: Optional[str] = None
    scope_id: Optional[str] = None
    type: Optional[str] = None
    start: Optional[str] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportsProfilesOptions:
    x_correlation_id: Optional[str] = None
    report_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportsScopesOptions:
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportOptions:
    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportSummaryOptions:
    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportTagsOptions:
    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportViolationsDriftOptions:
    """`scan_time_duration` is a number of days; 0 is sent as-is."""

    report_id: Optional[str] = None
    scan_time_duration: Optional[int] = None
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


# ───────────────────────────────────────────────────────────────
# Operation descriptors
# ───────────────────────────────────────────────────────────────

GET_LATEST_REPORTS = OperationSpec(
    operation_id="GetLatestReports",
    options_name="get_latest_reports_options",
    path="/reports/latest",
    query_params=("sort",),
    decoder=GetLatestReportsResponse.from_dict,
)

LIST_REPORTS = OperationSpec(
    operation_id="ListReports",
    options_name="list_reports_options",
    path="/reports",
    query_params=(
        "attachment_id",
        "group_id",
        "profile_id",
        "scope_id",
        "type",
        "start",
        "limit",
        "sort",
    ),
    decoder=ReportPage.from_dict,
)

GET_REPORTS_PROFILES = OperationSpec(
    operation_id="GetReportsProfiles",
    options_name="get_reports_profiles_options",
    path="/reports/profiles",
    query_params=("report_id",),
    decoder=GetProfilesResponse.from_dict,
)

GET_REPORTS_SCOPES = OperationSpec(
    operation_id="GetReportsScopes",
    options_name="get_reports_scopes_options",
    path="/reports/scopes",
    decoder=GetScopesResponse.from_dict,
)

GET_REPORT = OperationSpec(
    operation_id="GetReport",
    options_name="get_report_options",
    path="/reports/{report_id}",
    path_params=("report_id",),
    decoder=Report.from_dict,
)

GET_REPORT_SUMMARY = OperationSpec(
    operation_id="GetReportSummary",
    options_name="get_report_summary_options",
    path="/reports/{report_id}/summary",
    path_params=("report_id",),
    decoder=ReportSummary.from_dict,
)

GET_REPORT_TAGS = OperationSpec(
    operation_id="GetReportTags",
    options_name="get_report_tags_options",
    path="/reports/{report_id}/tags",
    path_params=("report_id",),
    decoder=GetTagsResponse.from_dict,
)

GET_REPORT_VIOLATIONS_DRIFT = OperationSpec(
    operation_id="GetReportViolationsDrift",
    options_name="get_report_violations_drift_options",
    path="/reports/{report_id}/violations_drift",
    path_params=("report_id",),
    query_params=("scan_time_duration",),
    decoder=GetReportViolationsDriftResult.from_dict,
)


# ───────────────────────────────────────────────────────────────
# ReportsMixin
# ───────────────────────────────────────────────────────────────

class ReportsMixin:
    """
    High-level wrapper for the report endpoints:

        client.get_latest_reports(...)
        client.list_reports(...) / client.new_reports_pager(...)
        client.get_reports_profiles(...)
        client.get_reports_scopes(...)
        client.get_report(...)
        client.get_report_summary(...)
        client.get_report_tags(...)
        client.get_report_violations_drift(...)

    Each `*_with_context` form takes an explicit RequestContext; the short
    form runs without deadline or cancellation. Both return
    ``(result, DetailedResponse)``.

    Assumes `self._service` is a BaseService instance.
    """

    _service: BaseService

    # ── Latest reports ──────────────────────────────────────────

    def get_latest_reports_with_context(
        self,
        options: Optional[GetLatestReportsOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetLatestReportsResponse], DetailedResponse]:
        """
        Retrieve the latest reports, grouped by profile, scope and
        attachment.
        """
        return self._service.invoke(GET_LATEST_REPORTS, options, context)

    def get_latest_reports(
        self, options: Optional[GetLatestReportsOptions]
    ) -> Tuple[Optional[GetLatestReportsResponse], DetailedResponse]:
        return self.get_latest_reports_with_context(options)

    # ── List reports ────────────────────────────────────────────

    def list_reports_with_context(
        self,
        options: Optional[ListReportsOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[ReportPage], DetailedResponse]:
        """Retrieve one page of reports filtered by the given options."""
        return self._service.invoke(LIST_REPORTS, options, context)

    def list_reports(
        self, options: Optional[ListReportsOptions]
    ) -> Tuple[Optional[ReportPage], DetailedResponse]:
        return self.list_reports_with_context(options)

    def new_reports_pager(self, options: ListReportsOptions) -> Pager[Report]:
        """
        Pager over `list_reports`.

        Raises:
            StateError: `options.start` is already set.
        """

        def list_page(
            page_options: ListReportsOptions, context: Optional[RequestContext]
        ) -> Tuple[List[Report], Optional[str]]:
            result, _ = self.list_reports_with_context(page_options, context)
            if result is None:
                return [], None
            return list(result.reports or []), result.get_next_href()

        return Pager(list_page, options)

    # ── Profiles and scopes ─────────────────────────────────────

    def get_reports_profiles_with_context(
        self,
        options: Optional[GetReportsProfilesOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetProfilesResponse], DetailedResponse]:
        """
        Retrieve the distinct profiles found in reports, usable as a
        filtering option.
        """
        return self._service.invoke(GET_REPORTS_PROFILES, options, context)

    def get_reports_profiles(
        self, options: Optional[GetReportsProfilesOptions]
    ) -> Tuple[Optional[GetProfilesResponse], DetailedResponse]:
        return self.get_reports_profiles_with_context(options)

    def get_reports_scopes_with_context(
        self,
        options: Optional[GetReportsScopesOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetScopesResponse], DetailedResponse]:
        """Retrieve the distinct scopes found in reports."""
        return self._service.invoke(GET_REPORTS_SCOPES, options, context)

    def get_reports_scopes(
        self, options: Optional[GetReportsScopesOptions]
    ) -> Tuple[Optional[GetScopesResponse], DetailedResponse]:
        return self.get_reports_scopes_with_context(options)

    # ── Single report ───────────────────────────────────────────

    def get_report_with_context(
        self,
        options: Optional[GetReportOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[Report], DetailedResponse]:
        return self._service.invoke(GET_REPORT, options, context)

    def get_report(self, options: Optional[GetReportOptions]) -> Tuple[Optional[Report], DetailedResponse]:
        return self.get_report_with_context(options)

    def get_report_summary_with_context(
        self,
        options: Optional[GetReportSummaryOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[ReportSummary], DetailedResponse]:
        return self._service.invoke(GET_REPORT_SUMMARY, options, context)

    def get_report_summary(
        self, options: Optional[GetReportSummaryOptions]
    ) -> Tuple[Optional[ReportSummary], DetailedResponse]:
        return self.get_report_summary_with_context(options)

    def get_report_tags_with_context(
        self,
        options: Optional[GetReportTagsOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetTagsResponse], DetailedResponse]:
        return self._service.invoke(GET_REPORT_TAGS, options, context)

    def get_report_tags(
        self, options: Optional[GetReportTagsOptions]
    ) -> Tuple[Optional[GetTagsResponse], DetailedResponse]:
        return self.get_report_tags_with_context(options)

    def get_report_violations_drift_with_context(
        self,
        options: Optional[GetReportViolationsDriftOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetReportViolationsDriftResult], DetailedResponse]:
        """
        Retrieve violation data points for a report over the last
        `scan_time_duration` days.
        """
        return self._service.invoke(GET_REPORT_VIOLATIONS_DRIFT, options, context)

    def get_report_violations_drift(
        self, options: Optional[GetReportViolationsDriftOptions]
    ) -> Tuple[Optional[GetReportViolationsDriftResult], DetailedResponse]:
        return self.get_report_violations_drift_with_context(options)


__all__ = [
    "GetLatestReportsOptions",
    "GetLatestReportsResponse",
    "GetProfilesResponse",
    "GetReportOptions",
    "GetReportSummaryOptions",
    "GetReportTagsOptions",
    "GetReportViolationsDriftOptions",
    "GetReportViolationsDriftResult",
    "GetReportsProfilesOptions",
    "GetReportsScopesOptions",
    "GetScopesResponse",
    "GetTagsResponse",
    "ListReportsOptions",
    "Report",
    "ReportPage",
    "ReportSummary",
    "ReportViolationDataPoint",
    "ReportsMixin",
    "ResourceSummary",
    "ResourceSummaryItem",
]
