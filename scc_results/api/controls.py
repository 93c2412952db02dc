"""
Controls API
============

Per-report control results and the rules backing their assessments.

Endpoints
---------
GET /reports/{report_id}/controls          → controls with evaluation stats
GET /reports/{report_id}/rules/{rule_id}   → a rule referenced by a report
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from scc_results.api.core.codec import opt_int, opt_model_list, opt_str, opt_str_list
from scc_results.api.core.context import RequestContext
from scc_results.api.core.debugging_requests import DetailedResponse
from scc_results.api.core.operations import OperationSpec
from scc_results.api.core.service import BaseService
from scc_results.api.shared import Assessment

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Dataclasses
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ControlSpecificationWithStats:
    """A control specification with the stats of its assessments."""

    id: Optional[str] = None
    component_id: Optional[str] = None
    description: Optional[str] = None
    environment: Optional[str] = None
    responsibility: Optional[str] = None
    assessments: Optional[List[Assessment]] = None
    status: Optional[str] = None
    total_count: Optional[int] = None
    compliant_count: Optional[int] = None
    not_compliant_count: Optional[int] = None
    unable_to_perform_count: Optional[int] = None
    user_evaluation_required_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ControlSpecificationWithStats":
        return cls(
            id=opt_str(d, "id"),
            component_id=opt_str(d, "component_id"),
            description=opt_str(d, "description"),
            environment=opt_str(d, "environment"),
            responsibility=opt_str(d, "responsibility"),
            assessments=opt_model_list(d, "assessments", Assessment),
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            compliant_count=opt_int(d, "compliant_count"),
            not_compliant_count=opt_int(d, "not_compliant_count"),
            unable_to_perform_count=opt_int(d, "unable_to_perform_count"),
            user_evaluation_required_count=opt_int(d, "user_evaluation_required_count"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ControlWithStats:
    id: Optional[str] = None
    control_library_id: Optional[str] = None
    control_library_version: Optional[str] = None
    control_name: Optional[str] = None
    control_description: Optional[str] = None
    control_category: Optional[str] = None
    control_path: Optional[str] = None
    control_specifications: Optional[List[ControlSpecificationWithStats]] = None
    status: Optional[str] = None
    total_count: Optional[int] = None
    compliant_count: Optional[int] = None
    not_compliant_count: Optional[int] = None
    unable_to_perform_count: Optional[int] = None
    user_evaluation_required_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ControlWithStats":
        return cls(
            id=opt_str(d, "id"),
            control_library_id=opt_str(d, "control_library_id"),
            control_library_version=opt_str(d, "control_library_version"),
            control_name=opt_str(d, "control_name"),
            control_description=opt_str(d, "control_description"),
            control_category=opt_str(d, "control_category"),
            control_path=opt_str(d, "control_path"),
            control_specifications=opt_model_list(
                d, "control_specifications", ControlSpecificationWithStats
            ),
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            compliant_count=opt_int(d, "compliant_count"),
            not_compliant_count=opt_int(d, "not_compliant_count"),
            unable_to_perform_count=opt_int(d, "unable_to_perform_count"),
            user_evaluation_required_count=opt_int(d, "user_evaluation_required_count"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class GetReportControlsResponse:
    """Controls of a report together with the aggregated stats."""

    status: Optional[str] = None
    total_count: Optional[int] = None
    compliant_count: Optional[int] = None
    not_compliant_count: Optional[int] = None
    unable_to_perform_count: Optional[int] = None
    user_evaluation_required_count: Optional[int] = None
    home_account_id: Optional[str] = None
    report_id: Optional[str] = None
    controls: Optional[List[ControlWithStats]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GetReportControlsResponse":
        return cls(
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            compliant_count=opt_int(d, "compliant_count"),
            not_compliant_count=opt_int(d, "not_compliant_count"),
            unable_to_perform_count=opt_int(d, "unable_to_perform_count"),
            user_evaluation_required_count=opt_int(d, "user_evaluation_required_count"),
            home_account_id=opt_str(d, "home_account_id"),
            report_id=opt_str(d, "report_id"),
            controls=opt_model_list(d, "controls", ControlWithStats),
            raw=dict(d),
        )


@dataclass(frozen=True)
class Rule:
    id: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    account_id: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None
    labels: Optional[List[str]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Rule":
        return cls(
            id=opt_str(d, "id"),
            type=opt_str(d, "type"),
            description=opt_str(d, "description"),
            version=opt_str(d, "version"),
            account_id=opt_str(d, "account_id"),
            created_at=opt_str(d, "created_at"),
            created_by=opt_str(d, "created_by"),
            updated_at=opt_str(d, "updated_at"),
            updated_by=opt_str(d, "updated_by"),
            labels=opt_str_list(d, "labels"),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Option bundles
# ───────────────────────────────────────────────────────────────

@dataclass
class GetReportControlsOptions:
    """`status` takes a ComplianceStatus value."""

    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    control_id: Optional[str] = None
    control_name: Optional[str] = None
    control_description: Optional[str] = None
    control_category: Optional[str] = None
    status: Optional[str] = None
    sort: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class GetReportRuleOptions:
    report_id: Optional[str] = None
    rule_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


# ───────────────────────────────────────────────────────────────
# Operation descriptors
# ───────────────────────────────────────────────────────────────

GET_REPORT_CONTROLS = OperationSpec(
    operation_id="GetReportControls",
    options_name="get_report_controls_options",
    path="/reports/{report_id}/controls",
    path_params=("report_id",),
    query_params=(
        "control_id",
        "control_name",
        "control_description",
        "control_category",
        "status",
        "sort",
    ),
    decoder=GetReportControlsResponse.from_dict,
)

GET_REPORT_RULE = OperationSpec(
    operation_id="GetReportRule",
    options_name="get_report_rule_options",
    path="/reports/{report_id}/rules/{rule_id}",
    path_params=("report_id", "rule_id"),
    decoder=Rule.from_dict,
)


# ───────────────────────────────────────────────────────────────
# ControlsMixin
# ───────────────────────────────────────────────────────────────

class ControlsMixin:
    """
    High-level wrapper for controls and rules:

        client.get_report_controls(...)
        client.get_report_rule(...)

    Assumes `self._service` is a BaseService instance.
    """

    _service: BaseService

    def get_report_controls_with_context(
        self,
        options: Optional[GetReportControlsOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[GetReportControlsResponse], DetailedResponse]:
        """
        Retrieve the controls of a report, optionally filtered by control
        attributes or status.

        Raises:
            ValidationError: `options` is None or `report_id` is empty.
        """
        return self._service.invoke(GET_REPORT_CONTROLS, options, context)

    def get_report_controls(
        self, options: Optional[GetReportControlsOptions]
    ) -> Tuple[Optional[GetReportControlsResponse], DetailedResponse]:
        return self.get_report_controls_with_context(options)

    def get_report_rule_with_context(
        self,
        options: Optional[GetReportRuleOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[Rule], DetailedResponse]:
        return self._service.invoke(GET_REPORT_RULE, options, context)

    def get_report_rule(
        self, options: Optional[GetReportRuleOptions]
    ) -> Tuple[Optional[Rule], DetailedResponse]:
        return self.get_report_rule_with_context(options)


__all__ = [
    "ControlSpecificationWithStats",
    "ControlWithStats",
    "ControlsMixin",
    "GetReportControlsOptions",
    "GetReportControlsResponse",
    "GetReportRuleOptions",
    "Rule",
]
