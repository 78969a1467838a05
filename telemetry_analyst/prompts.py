"""
Prompt construction and response parsing for the remote analysis service.

The service itself is an external collaborator. This module only turns
summaries into prompt text and turns the service's JSON report back into an
AnalysisReport.
"""

from __future__ import annotations

import json
from typing import Iterable

from .domain import REPORT_STATUSES, AnalysisReport, ChatMessage


class ReportParseError(ValueError):
    """The analysis service returned something that is not a valid report."""


FALLBACK_SUMMARY = "Analysis failed because the analysis service returned an error."


def build_report_prompt(summary: str) -> str:
    return f"""You are a Senior Flight Data Analyst for a rocket launch.
Analyze the following flight telemetry summary and anomaly report.

Telemetry Data:
{summary}

Provide a JSON response with the following structure:
{{
    "status": "success" | "warning" | "critical",
    "summary": "A concise 2-3 sentence summary of the flight performance.",
    "keyInsights": ["Insight 1", "Insight 2", "Insight 3"],
    "recommendations": ["Recommendation 1", "Recommendation 2"]
}}

Focus on engineering assessment. If high severity anomalies are present, status should be warning or critical.
"""


def build_range_prompt(range_summary: str) -> str:
    return f"""You are analyzing a specific segment of rocket flight telemetry.
The user has isolated a time range and selected specific metrics for joint analysis.

Data Segment:
{range_summary}

Task:
1. Analyze the behavior of the selected metrics during this specific interval.
2. Identify any correlations or inverse relationships between them in this window.
3. If there are anomalies (spikes/drops), explain potential physical causes (e.g., staging event, Max-Q, engine cutoff).

Output:
Provide a concise, technical paragraph explaining the relationship between these metrics in this timeframe.
Do not output JSON. Output plain text/markdown.
"""


def build_chat_instruction(context: str) -> str:
    return (
        "You are AstroAI, a flight data assistant.\n"
        "Context: User is analyzing a rocket flight.\n"
        f"Data Summary: {context}\n\n"
        "Answer brief, technical, and helpful questions."
    )


def format_chat_turn(history: Iterable[ChatMessage], message: str) -> str:
    past = "\n".join(f"{m.role}: {m.text}" for m in history)
    return f"History:\n{past}\n\nUser: {message}"


def _str_list(payload: dict, key: str) -> tuple[str, ...]:
    items = payload.get(key, [])
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise ReportParseError(f"'{key}' must be a list of strings")
    return tuple(items)


def parse_report(text: str) -> AnalysisReport:
    """
    Parse the service's JSON report.

    Accepts the camelCase keys the prompt asks for (keyInsights) as well as
    snake_case (key_insights).

    Raises:
        ReportParseError: empty text, invalid JSON, or wrong field types
    """
    if not text or not text.strip():
        raise ReportParseError("No response from analysis service")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Report is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ReportParseError("Report must be a JSON object")

    status = payload.get("status", "unknown")
    if status not in REPORT_STATUSES:
        raise ReportParseError(f"Unknown report status: {status!r}")
    summary = payload.get("summary", "")
    if not isinstance(summary, str):
        raise ReportParseError("'summary' must be a string")

    insights_key = "keyInsights" if "keyInsights" in payload else "key_insights"
    return AnalysisReport(
        status=status,
        summary=summary,
        key_insights=_str_list(payload, insights_key),
        recommendations=_str_list(payload, "recommendations"),
    )


def fallback_report(error: BaseException | str) -> AnalysisReport:
    """Report shown in place of a real one when the service call fails."""
    return AnalysisReport(
        status="unknown",
        summary=FALLBACK_SUMMARY,
        key_insights=("Unable to process the data.",),
        recommendations=(
            "Check the analysis service configuration and network connection.",
            f"Error message: {error}",
        ),
    )
