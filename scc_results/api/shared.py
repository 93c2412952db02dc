"""
Shared models
=============

Objects that appear in more than one Results API response: status
enumerations, account/profile/scope references, compliance statistics,
assessments and the pagination envelope.

Every model keeps the decoded JSON in `raw`. Fields absent from the JSON
are None; fields present with an empty value keep that value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from scc_results.api.core.codec import (
    opt_any,
    opt_int,
    opt_model_list,
    opt_str,
    opt_str_list,
    require,
)
from scc_results.api.core.pagination import next_start_from_href

JSON = Dict[str, Any]


# ───────────────────────────────────────────────────────────────
# Enumerations
# ───────────────────────────────────────────────────────────────

class ComplianceStatus(str, Enum):
    """Aggregated status of controls, specifications, assessments and resources."""

    COMPLIANT = "compliant"
    NOT_COMPLIANT = "not_compliant"
    UNABLE_TO_PERFORM = "unable_to_perform"
    USER_EVALUATION_REQUIRED = "user_evaluation_required"


class EvaluationStatus(str, Enum):
    PASS = "pass"
    FAILURE = "failure"
    ERROR = "error"
    SKIPPED = "skipped"


class ScanType(str, Enum):
    ONDEMAND = "ondemand"
    SCHEDULED = "scheduled"


# ───────────────────────────────────────────────────────────────
# References
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Account:
    """The account that is associated with a report."""

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Account":
        return cls(
            id=opt_str(d, "id"),
            name=opt_str(d, "name"),
            type=opt_str(d, "type"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class Attachment:
    id: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Attachment":
        return cls(id=opt_str(d, "id"), raw=dict(d))


@dataclass(frozen=True)
class Profile:
    id: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Profile":
        return cls(
            id=opt_str(d, "id"),
            name=opt_str(d, "name"),
            version=opt_str(d, "version"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class Scope:
    id: Optional[str] = None
    type: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Scope":
        return cls(id=opt_str(d, "id"), type=opt_str(d, "type"), raw=dict(d))


@dataclass(frozen=True)
class Tags:
    """Tags grouped by kind."""

    user: Optional[List[str]] = None
    access: Optional[List[str]] = None
    service: Optional[List[str]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Tags":
        return cls(
            user=opt_str_list(d, "user"),
            access=opt_str_list(d, "access"),
            service=opt_str_list(d, "service"),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Statistics
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ComplianceScore:
    passed: Optional[int] = None
    total_count: Optional[int] = None
    percent: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ComplianceScore":
        return cls(
            passed=opt_int(d, "passed"),
            total_count=opt_int(d, "total_count"),
            percent=opt_int(d, "percent"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class ComplianceStats:
    """Control counts by compliance status."""

    status: Optional[str] = None
    total_count: Optional[int] = None
    compliant_count: Optional[int] = None
    not_compliant_count: Optional[int] = None
    unable_to_perform_count: Optional[int] = None
    user_evaluation_required_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ComplianceStats":
        return cls(
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            compliant_count=opt_int(d, "compliant_count"),
            not_compliant_count=opt_int(d, "not_compliant_count"),
            unable_to_perform_count=opt_int(d, "unable_to_perform_count"),
            user_evaluation_required_count=opt_int(d, "user_evaluation_required_count"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class EvalStats:
    """Evaluation counts by outcome."""

    status: Optional[str] = None
    total_count: Optional[int] = None
    pass_count: Optional[int] = None
    failure_count: Optional[int] = None
    error_count: Optional[int] = None
    completed_count: Optional[int] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EvalStats":
        return cls(
            status=opt_str(d, "status"),
            total_count=opt_int(d, "total_count"),
            pass_count=opt_int(d, "pass_count"),
            failure_count=opt_int(d, "failure_count"),
            error_count=opt_int(d, "error_count"),
            completed_count=opt_int(d, "completed_count"),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Assessments
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Parameter:
    """An assessment parameter; `parameter_value` may be any JSON value."""

    parameter_name: Optional[str] = None
    parameter_display_name: Optional[str] = None
    parameter_type: Optional[str] = None
    parameter_value: Any = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Parameter":
        return cls(
            parameter_name=opt_str(d, "parameter_name"),
            parameter_display_name=opt_str(d, "parameter_display_name"),
            parameter_type=opt_str(d, "parameter_type"),
            parameter_value=opt_any(d, "parameter_value"),
            raw=dict(d),
        )


@dataclass(frozen=True)
class Assessment:
    """The control specification assessment."""

    assessment_id: Optional[str] = None
    assessment_type: Optional[str] = None
    assessment_method: Optional[str] = None
    assessment_description: Optional[str] = None
    parameter_count: Optional[int] = None
    parameters: Optional[List[Parameter]] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Assessment":
        return cls(
            assessment_id=opt_str(d, "assessment_id"),
            assessment_type=opt_str(d, "assessment_type"),
            assessment_method=opt_str(d, "assessment_method"),
            assessment_description=opt_str(d, "assessment_description"),
            parameter_count=opt_int(d, "parameter_count"),
            parameters=opt_model_list(d, "parameters", Parameter),
            raw=dict(d),
        )


# ───────────────────────────────────────────────────────────────
# Pagination envelope
# ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PageHRef:
    href: Optional[str] = None
    raw: JSON = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PageHRef":
        return cls(href=opt_str(d, "href"), raw=dict(d))


def require_page_envelope(d: Mapping[str, Any]) -> None:
    """total_count, limit and first are present on every page."""
    for key in ("total_count", "limit", "first"):
        require(d, key)


class Paginated:
    """Cursor helpers for page models exposing `next: Optional[PageHRef]`."""

    next: Optional[PageHRef]

    def get_next_start(self) -> Optional[str]:
        """The `start` value of the next page, or None on the last page."""
        if self.next is None:
            return None
        return next_start_from_href(self.next.href)

    def get_next_href(self) -> Optional[str]:
        return self.next.href if self.next is not None else None


__all__ = [
    "Account",
    "Assessment",
    "Attachment",
    "ComplianceScore",
    "ComplianceStats",
    "ComplianceStatus",
    "EvalStats",
    "EvaluationStatus",
    "PageHRef",
    "Paginated",
    "Parameter",
    "Profile",
    "ScanType",
    "Scope",
    "Tags",
    "require_page_envelope",
]
