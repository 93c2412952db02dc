"""Unit tests for the report operations."""

import httpx
import pytest

from scc_results.api.core.errors import ServiceError, StateError, ValidationError
from scc_results.api.reports import (
    GetLatestReportsOptions,
    GetLatestReportsResponse,
    GetReportOptions,
    GetReportsProfilesOptions,
    GetReportsScopesOptions,
    GetReportSummaryOptions,
    GetReportTagsOptions,
    GetReportViolationsDriftOptions,
    ListReportsOptions,
    Report,
    ReportPage,
)
from scc_results.api.shared import ScanType

BASE_PATH = "/instances/i1/v3"

REPORT_JSON = {
    "id": "44a5-a292-32114fa73558",
    "group_id": "55b6-b3A4-432250b84669",
    "created_at": "2022-08-15T12:30:01Z",
    "scan_time": "2022-08-15T12:30:01Z",
    "type": "scheduled",
    "cos_object": "crn:v1:bluemix:public:cloud-object-storage:global:a/x",
    "instance_id": "84644a08-31b6-4988-b504-49a46ca69ccd",
    "account": {"id": "59bcbfa6ea2f006b4ed7094c1a08dcdd", "name": "NIST", "type": "account_type"},
    "profile": {"id": "44a5-a292-32114fa73558", "name": "IBM FS Cloud", "version": "0.1"},
    "scope": {"id": "ca0941aa-b7e2-43a3-9794-1b3d322474d9", "type": "account"},
    "attachment": {"id": "531fc3e28bfc43c5a2cea07786d93f5c"},
}


def page(reports, next_href=None):
    body = {"total_count": 2, "limit": 1, "first": {"href": "https://x/v3/reports?limit=1"}, "reports": reports}
    if next_href is not None:
        body["next"] = {"href": next_href}
    return httpx.Response(200, json=body)


class TestGetLatestReports:
    def test_correlation_id_and_sort(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(
                200,
                json={
                    "home_account_id": "HomeAccountID",
                    "reports": [{"id": "44a5-a292-32114fa73558", "type": "scheduled"}],
                },
            )
        )
        result, response = client.get_latest_reports(
            GetLatestReportsOptions(x_correlation_id="testString", sort="testString")
        )

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == BASE_PATH + "/reports/latest"
        assert request.url.query == b"sort=testString"
        assert request.headers["X-Correlation-Id"] == "testString"
        assert request.headers["Accept"] == "application/json"

        assert isinstance(result, GetLatestReportsResponse)
        assert result.home_account_id == "HomeAccountID"
        assert len(result.reports) == 1
        assert result.reports[0].type == ScanType.SCHEDULED.value
        assert response.status_code == 200

    def test_summaries(self, scripted_client):
        client, _ = scripted_client(
            httpx.Response(
                200,
                json={
                    "controls_summary": {"status": "compliant", "total_count": 150, "compliant_count": 130},
                    "evaluations_summary": {"status": "failure", "pass_count": 7, "failure_count": 1},
                    "score": {"passed": 1, "total_count": 4, "percent": 25},
                },
            )
        )
        result, _ = client.get_latest_reports(GetLatestReportsOptions())
        assert result.controls_summary.compliant_count == 130
        assert result.evaluations_summary.failure_count == 1
        assert result.score.percent == 25
        assert result.reports is None

    def test_none_options(self, scripted_client):
        client, transport = scripted_client()
        with pytest.raises(ValidationError, match="get_latest_reports_options cannot be None"):
            client.get_latest_reports(None)
        assert transport.calls == 0


class TestListReports:
    def test_query_parameters_in_order(self, scripted_client):
        client, transport = scripted_client(page([REPORT_JSON]))
        options = ListReportsOptions(
            attachment_id="a",
            group_id="g",
            profile_id="p",
            scope_id="s",
            type="ondemand",
            start="st",
            limit=10,
            sort="profile_name",
        )
        result, _ = client.list_reports(options)
        assert transport.requests[0].url.query == (
            b"attachment_id=a&group_id=g&profile_id=p&scope_id=s&type=ondemand&start=st&limit=10&sort=profile_name"
        )
        assert isinstance(result, ReportPage)
        report = result.reports[0]
        assert isinstance(report, Report)
        assert report.account.name == "NIST"
        assert report.profile.version == "0.1"
        assert report.scope.type == "account"
        assert report.attachment.id == "531fc3e28bfc43c5a2cea07786d93f5c"

    def test_next_start(self, scripted_client):
        client, _ = scripted_client(page([], next_href="https://x/v3/reports?limit=1&start=abc"))
        result, _ = client.list_reports(ListReportsOptions())
        assert result.get_next_start() == "abc"

    def test_last_page_has_no_next_start(self, scripted_client):
        client, _ = scripted_client(page([]))
        result, _ = client.list_reports(ListReportsOptions())
        assert result.get_next_start() is None


class TestReportsPager:
    """list_reports through a pager."""

    def test_two_pages(self, scripted_client):
        client, transport = scripted_client(
            page([{"id": "A"}], next_href="https://x/y?start=1"),
            page([{"id": "B"}]),
        )
        pager = client.new_reports_pager(ListReportsOptions(limit=1))
        reports = pager.get_all()

        assert [r.id for r in reports] == ["A", "B"]
        assert transport.calls == 2
        assert "start" not in transport.requests[0].url.params
        assert transport.requests[1].url.params["start"] == "1"
        assert transport.requests[1].url.params["limit"] == "1"
        assert not pager.has_next()

    def test_get_next(self, scripted_client):
        client, _ = scripted_client(page([{"id": "A"}], next_href="https://x/y?start=1"), page([{"id": "B"}]))
        pager = client.new_reports_pager(ListReportsOptions())
        assert pager.has_next()
        assert [r.id for r in pager.get_next()] == ["A"]
        assert pager.has_next()
        assert [r.id for r in pager.get_next()] == ["B"]
        with pytest.raises(StateError):
            pager.get_next()

    def test_rejects_preset_start(self, scripted_client):
        client, _ = scripted_client()
        with pytest.raises(StateError, match="start must not be pre-set on a pager"):
            client.new_reports_pager(ListReportsOptions(start="1"))

    def test_caller_options_untouched(self, scripted_client):
        client, _ = scripted_client(page([{"id": "A"}], next_href="https://x/y?start=1"), page([]))
        options = ListReportsOptions(limit=1)
        client.new_reports_pager(options).get_all()
        assert options.start is None

    def test_error_propagates(self, scripted_client):
        client, _ = scripted_client(httpx.Response(403, json={"message": "forbidden"}))
        pager = client.new_reports_pager(ListReportsOptions())
        with pytest.raises(ServiceError, match="forbidden"):
            pager.get_next()


class TestProfilesAndScopes:
    def test_profiles(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(200, json={"home_account_id": "h", "profiles": [{"id": "p1", "name": "n", "version": "1"}]})
        )
        result, _ = client.get_reports_profiles(GetReportsProfilesOptions(report_id="r1"))
        assert transport.requests[0].url.path == BASE_PATH + "/reports/profiles"
        assert transport.requests[0].url.params["report_id"] == "r1"
        assert result.profiles[0].name == "n"

    def test_scopes(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(200, json={"home_account_id": "h", "scopes": [{"id": "s1", "type": "account"}]})
        )
        result, _ = client.get_reports_scopes(GetReportsScopesOptions())
        request = transport.requests[0]
        assert request.url.path == BASE_PATH + "/reports/scopes"
        assert request.url.query == b""
        assert request.headers["X-IBMCloud-SDK-Analytics"].endswith("operation_id=GetReportsScopes")
        assert result.scopes[0].type == "account"


class TestSingleReport:
    def test_get_report(self, scripted_client):
        client, transport = scripted_client(httpx.Response(200, json=REPORT_JSON))
        result, _ = client.get_report(GetReportOptions(report_id="r1"))
        assert transport.requests[0].url.path == BASE_PATH + "/reports/r1"
        assert result.id == REPORT_JSON["id"]
        assert result.cos_object.startswith("crn:")

    @pytest.mark.parametrize("report_id", ["", None])
    def test_missing_report_id(self, scripted_client, report_id):
        client, transport = scripted_client()
        with pytest.raises(ValidationError, match="report_id is required"):
            client.get_report(GetReportOptions(report_id=report_id))
        assert transport.calls == 0

    def test_summary(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(
                200,
                json={
                    "report_id": "r1",
                    "isntance_id": "i1",
                    "account": {"id": "a"},
                    "score": {"passed": 1, "total_count": 4, "percent": 25},
                    "controls": {"status": "compliant", "total_count": 150},
                    "evaluations": {"status": "failure", "total_count": 140},
                    "resources": {
                        "status": "compliant",
                        "total_count": 150,
                        "top_failed": [
                            {
                                "name": "resource_name",
                                "id": "crn:x",
                                "service": "cloud-object-storage",
                                "tags": {"user": ["u"], "access": [], "service": []},
                                "account": "59bcbfa6ea2f006b4ed7094c1a08dcdd",
                                "failure_count": 1,
                            }
                        ],
                    },
                },
            )
        )
        result, _ = client.get_report_summary(GetReportSummaryOptions(report_id="r1"))
        assert transport.requests[0].url.path == BASE_PATH + "/reports/r1/summary"
        assert result.isntance_id == "i1"
        assert result.controls.total_count == 150
        item = result.resources.top_failed[0]
        assert item.tags.user == ["u"]
        assert item.tags.access == []
        assert item.account == "59bcbfa6ea2f006b4ed7094c1a08dcdd"

    def test_tags(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(200, json={"report_id": "r1", "tags": {"user": ["a"], "access": ["b"], "service": ["c"]}})
        )
        result, _ = client.get_report_tags(GetReportTagsOptions(report_id="r1"))
        assert transport.requests[0].url.path == BASE_PATH + "/reports/r1/tags"
        assert result.tags.service == ["c"]

    def test_violations_drift(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(
                200,
                json={
                    "home_account_id": "h",
                    "report_id": "r1",
                    "data_points": [
                        {
                            "report_id": "r0",
                            "report_group_id": "g",
                            "scan_time": "2022-08-15T12:30:01Z",
                            "controls": {"status": "not_compliant", "not_compliant_count": 3},
                        }
                    ],
                },
            )
        )
        result, _ = client.get_report_violations_drift(
            GetReportViolationsDriftOptions(report_id="r1", scan_time_duration=0)
        )
        request = transport.requests[0]
        assert request.url.path == BASE_PATH + "/reports/r1/violations_drift"
        assert request.url.params["scan_time_duration"] == "0"
        assert result.data_points[0].controls.not_compliant_count == 3
