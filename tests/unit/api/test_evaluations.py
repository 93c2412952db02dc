"""Unit tests for the evaluation operations."""

import httpx
import pytest

from scc_results.api.core.codec import BinaryStream
from scc_results.api.core.errors import ServiceError, StateError, ValidationError
from scc_results.api.evaluations import (
    EvaluationPage,
    GetReportEvaluationOptions,
    ListReportEvaluationsOptions,
)
from scc_results.api.shared import EvaluationStatus

BASE_PATH = "/instances/i1/v3"

EVALUATION_JSON = {
    "home_account_id": "h",
    "report_id": "r1",
    "control_id": "c",
    "component_id": "cloud-object_storage",
    "assessment": {"assessment_id": "rule-1", "assessment_type": "automated"},
    "evaluate_time": "2022-06-30T11:03:44.630150782Z",
    "target": {
        "id": "crn:v1:bluemix:public:cloud-object-storage:global:a/x",
        "account_id": "59bcbfa6ea2f006b4ed7094c1a08dcdd",
        "resource_crn": "crn:v1:bluemix:public:cloud-object-storage:global:a/x",
        "resource_name": "mybucket",
        "service_name": "cloud-object-storage",
    },
    "status": "failure",
    "reason": "One or more conditions in rule rule-1 failed",
    "details": {
        "properties": [
            {
                "property": "allowed_ips",
                "property_description": "Allowed IPs",
                "operator": "string_equals",
                "expected_value": "10.0.0.1",
                "found_value": None,
            }
        ]
    },
}


def evaluation_page(evaluations, next_href=None):
    body = {
        "total_count": 2,
        "limit": 1,
        "first": {"href": "https://x/v3/reports/r1/evaluations?limit=1"},
        "home_account_id": "h",
        "report_id": "r1",
        "evaluations": evaluations,
    }
    if next_href is not None:
        body["next"] = {"href": next_href}
    return httpx.Response(200, json=body)


class TestGetReportEvaluation:
    """CSV download."""

    def test_binary_download(self, scripted_client):
        client, transport = scripted_client(
            httpx.Response(200, content=b"col1,col2\n1,2\n", headers={"Content-Type": "application/csv"})
        )
        result, response = client.get_report_evaluation(
            GetReportEvaluationOptions(report_id="r1", exclude_summary=True)
        )

        request = transport.requests[0]
        assert request.url.path == BASE_PATH + "/reports/r1/download"
        assert request.url.query == b"exclude_summary=true"
        assert request.headers["Accept"] == "application/csv"

        assert isinstance(result, BinaryStream)
        assert response.result is result
        assert response.raw_body is None
        with result as stream:
            assert stream.read() == b"col1,col2\n1,2\n"
        assert result.closed

    def test_exclude_summary_false(self, scripted_client):
        client, transport = scripted_client(httpx.Response(200, content=b"x"))
        result, _ = client.get_report_evaluation(GetReportEvaluationOptions(report_id="r1", exclude_summary=False))
        result.close()
        assert transport.requests[0].url.params["exclude_summary"] == "false"

    def test_zero_length_body(self, scripted_client):
        client, _ = scripted_client(httpx.Response(200, headers={"Content-Length": "0"}))
        result, response = client.get_report_evaluation(GetReportEvaluationOptions(report_id="r1"))
        assert result is None
        assert response.status_code == 200

    def test_error_status(self, scripted_client):
        client, _ = scripted_client(httpx.Response(404, json={"errors": [{"message": "no such report"}]}))
        with pytest.raises(ServiceError, match="no such report"):
            client.get_report_evaluation(GetReportEvaluationOptions(report_id="r1"))

    def test_missing_report_id(self, scripted_client):
        client, transport = scripted_client()
        with pytest.raises(ValidationError):
            client.get_report_evaluation(GetReportEvaluationOptions())
        assert transport.calls == 0


class TestListReportEvaluations:
    def test_query_and_decoding(self, scripted_client):
        client, transport = scripted_client(evaluation_page([EVALUATION_JSON]))
        options = ListReportEvaluationsOptions(
            report_id="r1",
            assessment_id="a",
            component_id="c",
            target_id="t",
            target_name="tn",
            status=EvaluationStatus.FAILURE.value,
            start="s",
            limit=10,
        )
        result, _ = client.list_report_evaluations(options)

        request = transport.requests[0]
        assert request.url.path == BASE_PATH + "/reports/r1/evaluations"
        assert request.url.query == (
            b"assessment_id=a&component_id=c&target_id=t&target_name=tn&status=failure&start=s&limit=10"
        )
        assert isinstance(result, EvaluationPage)
        evaluation = result.evaluations[0]
        assert evaluation.target.resource_name == "mybucket"
        assert evaluation.assessment.assessment_type == "automated"
        assert evaluation.details.properties[0].operator == "string_equals"
        assert evaluation.details.properties[0].found_value is None

    def test_pager(self, scripted_client):
        second = dict(EVALUATION_JSON, control_id="c2")
        client, transport = scripted_client(
            evaluation_page([EVALUATION_JSON], next_href="https://x/v3/reports/r1/evaluations?start=next1"),
            evaluation_page([second]),
        )
        pager = client.new_report_evaluations_pager(ListReportEvaluationsOptions(report_id="r1", limit=1))
        evaluations = list(pager)

        assert [e.control_id for e in evaluations] == ["c", "c2"]
        assert transport.calls == 2
        assert transport.requests[1].url.path == BASE_PATH + "/reports/r1/evaluations"
        assert transport.requests[1].url.params["start"] == "next1"

    def test_pager_rejects_preset_start(self, scripted_client):
        client, _ = scripted_client()
        with pytest.raises(StateError):
            client.new_report_evaluations_pager(ListReportEvaluationsOptions(report_id="r1", start="x"))
