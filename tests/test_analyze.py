"""Tests for pipeline orchestration and the analysis-service hand-off in analyze.py / prompts.py"""

import io
import json

import pytest

from telemetry_analyst.analyze import (
    CHAT_EMPTY,
    RANGE_ANALYSIS_EMPTY,
    RANGE_ANALYSIS_FAILED,
    AnalysisResult,
    analyze_csv,
    analyze_series,
    chat_with_flight_data,
    request_range_analysis,
    request_report,
)
from telemetry_analyst.config import ModelSettings
from telemetry_analyst.domain import DEFAULT_REGISTRY, AnalysisReport, ChatMessage
from telemetry_analyst.prompts import (
    FALLBACK_SUMMARY,
    ReportParseError,
    build_range_prompt,
    build_report_prompt,
    fallback_report,
    format_chat_turn,
    parse_report,
)
from telemetry_analyst.synthetic import generate_profile


class FakeClient:
    """Records prompts and returns a canned reply (or raises)."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, settings, *, json_response=False, system_instruction=None):
        self.calls.append(
            {"prompt": prompt, "settings": settings, "json": json_response, "system": system_instruction}
        )
        if self.error is not None:
            raise self.error
        return self.reply


GOOD_REPORT = json.dumps({
    "status": "warning",
    "summary": "Nominal ascent with a brief engine temperature spike.",
    "keyInsights": ["Spike at T+120 s", "Max-Q near T+23 s"],
    "recommendations": ["Inspect engine thermocouple"],
})


@pytest.fixture
def settings():
    return ModelSettings(model_name="gemini-2.5-flash", thinking_budget=0)


class TestAnalyzeSeries:
    """Tests for the analyze_series function."""

    def test_runs_detect_and_summarize(self):
        """Synthetic flight yields anomalies and a summary mentioning them."""
        series = generate_profile(seed=5)
        result = analyze_series(series, DEFAULT_REGISTRY)

        assert isinstance(result, AnalysisResult)
        assert result.series is series
        assert any(a.metric_id == "temp_engine" for a in result.anomalies)
        assert f"Total anomalies detected: {len(result.anomalies)}." in result.summary
        assert result.summary.startswith("Flight duration: 300.0 s.")


class TestAnalyzeCsv:
    """Tests for the analyze_csv function."""

    def test_success(self):
        """Valid CSV returns a result and no error."""
        result, error = analyze_csv(io.StringIO("time,altitude\n0,1\n1,2\n"), DEFAULT_REGISTRY)
        assert error is None
        assert len(result.series) == 2
        assert result.anomalies == []

    def test_nothing_usable(self):
        """CSV with no recognizable columns returns an error message."""
        result, error = analyze_csv(io.StringIO("foo,bar\n1,2\n"), DEFAULT_REGISTRY)
        assert result is None
        assert "No usable telemetry" in error

    def test_unreadable_path(self, tmp_path):
        """Missing file becomes an error message instead of an exception."""
        result, error = analyze_csv(tmp_path / "missing.csv", DEFAULT_REGISTRY)
        assert result is None
        assert "Could not read" in error


class TestRequestReport:
    """Tests for the request_report function."""

    def test_parses_report(self, settings):
        """A valid JSON reply becomes an AnalysisReport."""
        client = FakeClient(reply=GOOD_REPORT)
        report = request_report("Flight duration: 300.0 s.", client, settings)

        assert report.status == "warning"
        assert report.key_insights == ("Spike at T+120 s", "Max-Q near T+23 s")
        assert report.recommendations == ("Inspect engine thermocouple",)

        call = client.calls[0]
        assert call["json"] is True
        assert call["settings"] is settings
        assert "Flight duration: 300.0 s." in call["prompt"]

    def test_client_error_gives_fallback(self, settings):
        """Transport failure is replaced by the fallback report."""
        client = FakeClient(error=ConnectionError("timeout"))
        report = request_report("summary", client, settings)

        assert report.status == "unknown"
        assert report.summary == FALLBACK_SUMMARY
        assert any("timeout" in r for r in report.recommendations)

    def test_bad_json_gives_fallback(self, settings):
        """Unparseable reply is replaced by the fallback report."""
        report = request_report("summary", FakeClient(reply="not json"), settings)
        assert report.status == "unknown"

    def test_empty_reply_gives_fallback(self, settings):
        """Empty reply counts as a failure."""
        report = request_report("summary", FakeClient(reply=""), settings)
        assert report.status == "unknown"


class TestRequestRangeAnalysis:
    """Tests for the request_range_analysis function."""

    def test_returns_text(self, settings):
        """Plain-text reply is passed through and no JSON is requested."""
        client = FakeClient(reply="Velocity and Q rise together.")
        assert request_range_analysis("Time range: ...", client, settings) == "Velocity and Q rise together."
        assert client.calls[0]["json"] is False
        assert "Time range: ..." in client.calls[0]["prompt"]

    def test_empty_reply(self, settings):
        """An empty reply maps to the fixed placeholder text."""
        assert request_range_analysis("x", FakeClient(reply=""), settings) == RANGE_ANALYSIS_EMPTY

    def test_failure(self, settings):
        """Client errors are logged and replaced by the failure message."""
        client = FakeClient(error=RuntimeError("boom"))
        assert request_range_analysis("x", client, settings) == RANGE_ANALYSIS_FAILED


class TestChat:
    """Tests for the chat_with_flight_data function."""

    def test_builds_history_and_context(self, settings):
        """Context goes into the system instruction, history into the prompt."""
        client = FakeClient(reply="Max-Q occurs early.")
        history = [ChatMessage("user", "When is Max-Q?"), ChatMessage("model", "Around T+23 s.")]

        reply = chat_with_flight_data(history, "Why then?", "Flight duration: 300.0 s.", client, settings)

        assert reply == "Max-Q occurs early."
        call = client.calls[0]
        assert "Flight duration: 300.0 s." in call["system"]
        assert call["prompt"].endswith("User: Why then?")
        assert "user: When is Max-Q?\nmodel: Around T+23 s." in call["prompt"]

    def test_empty_reply(self, settings):
        """An empty chat reply maps to the fixed placeholder text."""
        assert chat_with_flight_data([], "hi", "ctx", FakeClient(reply=""), settings) == CHAT_EMPTY

    def test_errors_propagate(self, settings):
        """Chat has no fallback; the caller sees the error."""
        with pytest.raises(RuntimeError):
            chat_with_flight_data([], "hi", "ctx", FakeClient(error=RuntimeError("down")), settings)


class TestPrompts:
    """Tests for prompt builders and report parsing."""

    def test_report_prompt_embeds_summary_and_schema(self):
        """The digest and the JSON field names both reach the prompt."""
        prompt = build_report_prompt("Total anomalies detected: 3.")
        assert "Total anomalies detected: 3." in prompt
        assert '"keyInsights"' in prompt

    def test_range_prompt_asks_for_plain_text(self):
        """Range analysis asks for prose, not JSON."""
        prompt = build_range_prompt("Time range: T+0.0s to T+1.0s")
        assert "Time range: T+0.0s to T+1.0s" in prompt
        assert "Do not output JSON" in prompt

    def test_format_chat_turn_empty_history(self):
        """No history still yields the fixed layout."""
        assert format_chat_turn([], "hello") == "History:\n\n\nUser: hello"

    def test_parse_report_snake_case(self):
        """snake_case keys are accepted too."""
        report = parse_report(json.dumps({
            "status": "success", "summary": "ok", "key_insights": ["a"], "recommendations": [],
        }))
        assert report == AnalysisReport("success", "ok", ("a",), ())

    @pytest.mark.parametrize("payload", [
        "",
        "   ",
        "[1, 2]",
        '{"status": "great", "summary": "x"}',
        '{"status": "success", "summary": 5}',
        '{"status": "success", "summary": "x", "keyInsights": "one"}',
        '{"status": "success", "summary": "x", "recommendations": [1]}',
    ])
    def test_parse_report_rejects_malformed(self, payload):
        """Wrong types, unknown statuses and non-objects are refused."""
        with pytest.raises(ReportParseError):
            parse_report(payload)

    def test_parse_error_is_value_error(self):
        """ReportParseError can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_report("{")

    def test_fallback_report(self):
        """The fallback carries the error text as its last recommendation."""
        report = fallback_report("API key invalid")
        assert report.status == "unknown"
        assert report.recommendations[-1] == "Error message: API key invalid"
