"""
Example showing how to list reports and download evaluations.

Reads the service URL and credentials from the environment:

    RESULTS_URL=https://us-south.compliance.cloud.ibm.com/instances/<id>/v3
    RESULTS_AUTH_TYPE=bearertoken
    RESULTS_BEARER_TOKEN=...
"""

import logging

from scc_results.api.core.context import RequestContext
from scc_results.api.core.debugging_requests import make_correlation_id
from scc_results.api.core.errors import ResultsError, ServiceError
from scc_results.api.evaluations import GetReportEvaluationOptions
from scc_results.api.reports import GetReportSummaryOptions, ListReportsOptions
from scc_results.client import ResultsClient


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    with ResultsClient.from_external_config() as client:
        client.enable_retries()

        try:
            pager = client.new_reports_pager(ListReportsOptions(limit=25, type="scheduled"))
            reports = pager.get_all(RequestContext.with_timeout(60))
            print("Reports:", len(reports))

            if reports:
                report_id = reports[0].id
                summary, response = client.get_report_summary(
                    GetReportSummaryOptions(report_id=report_id, x_correlation_id=make_correlation_id())
                )
                print("Score:", summary.score.percent if summary and summary.score else None)
                print("Correlation id:", response.correlation_id)

                stream, _ = client.get_report_evaluation(
                    GetReportEvaluationOptions(report_id=report_id, exclude_summary=True)
                )
                if stream is not None:
                    with stream:
                        with open(f"{report_id}.csv", "wb") as out:
                            for chunk in stream:
                                out.write(chunk)
        except ServiceError as exc:
            print("Service error:", exc, "correlation id:", exc.correlation_id)
        except ResultsError as exc:
            print("Request failed:", exc)
