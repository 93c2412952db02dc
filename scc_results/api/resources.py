"""
Resources API
=============

Endpoints
---------
GET /reports/{report_id}/resources   → list evaluated resources (paginated)
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
from scc_results.api.shared import PageHRef, Paginated, require_page_envelope

JSON = Dict[str, Any]


@dataclass(frozen=True)
class Resource:
    report_id: Optional[str] = None
    id: Optional[str] = None
    resource_name: Optional[str] = None
    component_id: Optional[str] = None
    environment: Optional[str] = None
    account: Optional[str] = None
    status: Optional[str] = None
    total_count: Optional[int] = None
    pass_count: Optional[int] = None
    failure_count: Optional[int] = None
    error_count: Optional[int] = None
    completed_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Resource":
        return cls(
            report_id=opt_str(d, "report_id"),
            id=opt_str(d, "id"),
            resource_name=opt_str(d, "resource_name"),
            component_id=opt_str(d, "component_id"),
            environment=opt_str(d, "environment"),
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
class ResourcePage(Paginated):
    total_count: Optional[int] = None
    limit: Optional[int] = None
    start: Optional[str] = None
    first: Optional[PageHRef] = None
    next: Optional[PageHRef] = None
    home_account_id: Optional[str] = None
    report_id: Optional[str] = None
    resources: Optional[List[Resource]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ResourcePage":
        require_page_envelope(d)
        return cls(
            total_count=opt_int(d, "total_count"),
            limit=opt_int(d, "limit"),
            start=opt_str(d, "start"),
            first=opt_model(d, "first", PageHRef),
            next=opt_model(d, "next", PageHRef),
            home_account_id=opt_str(d, "home_account_id"),
            report_id=opt_str(d, "report_id"),
            resources=opt_model_list(d, "resources", Resource),
            raw=dict(d),
        )


@dataclass
class ListReportResourcesOptions:
    """`id` filters on the resource id, `status` takes a ComplianceStatus value."""

    report_id: Optional[str] = None
    x_correlation_id: Optional[str] = None
    id: Optional[str] = None
    resource_name: Optional[str] = None
    account_id: Optional[str] = None
    component_id: Optional[str] = None
    status: Optional[str] = None
    start: Optional[str] = None
    limit: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)


LIST_REPORT_RESOURCES = OperationSpec(
    operation_id="ListReportResources",
    options_name="list_report_resources_options",
    path="/reports/{report_id}/resources",
    path_params=("report_id",),
    query_params=(
        "id",
        "resource_name",
        "account_id",
        "component_id",
        "status",
        "start",
        "limit",
    ),
    decoder=ResourcePage.from_dict,
)


class ResourcesMixin:
    """
    High-level wrapper for resources:

        client.list_report_resources(...)
        client.new_report_resources_pager(...)
    """

    _service: BaseService

    def list_report_resources_with_context(
        self,
        options: Optional[ListReportResourcesOptions],
        context: Optional[RequestContext] = None,
    ) -> Tuple[Optional[ResourcePage], DetailedResponse]:
        return self._service.invoke(LIST_REPORT_RESOURCES, options, context)

    def list_report_resources(
        self, options: Optional[ListReportResourcesOptions]
    ) -> Tuple[Optional[ResourcePage], DetailedResponse]:
        return self.list_report_resources_with_context(options)

    def new_report_resources_pager(self, options: ListReportResourcesOptions) -> Pager[Resource]:
        def list_page(
            page_options: ListReportResourcesOptions, context: Optional[RequestContext]
        ) -> Tuple[List[Resource], Optional[str]]:
            result, _ = self.list_report_resources_with_context(page_options, context)
            if result is None:
                return [], None
            return list(result.resources or []), result.get_next_href()

        return Pager(list_page, options)


__all__ = [
    "ListReportResourcesOptions",
    "Resource",
    "ResourcePage",
    "ResourcesMixin",
]
