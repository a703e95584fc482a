import openpyxl
import pytest

from alarm_ai.config import WorkflowSettings
from alarm_ai.documents.xlsx.alarm_sheet import ANSWER_HEADER, AlarmSheet
from alarm_ai.errors import ConfigurationError, InputError, PersistenceError
from alarm_ai.llm.workflow_client import WorkflowRunResult
from alarm_ai.workflows import alarm_job
from alarm_ai.workflows.alarm_job import default_output_path, run_alarm_job


SETTINGS = WorkflowSettings.create("http://dify.local/v1", "app-key")


class DummyClient:
    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def run_detailed(self, error_desc, error_code="0", cancel_token=None):
        self.calls.append(error_desc)
        return WorkflowRunResult(answer=self.answers[error_desc])


def build_workbook(path, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["Code", "Description", "C", "D", "E", "F", "Answer"])
    for code, desc, answer in rows:
        ws.append([code, desc, None, None, None, None, answer])
    wb.save(path)


def read_answers(path):
    wb = openpyxl.load_workbook(path)
    ws = wb.worksheets[0]
    return [ws.cell(row=r, column=7).value for r in range(1, ws.max_row + 1)]


def test_job_answers_rows_and_saves_copy(tmp_path, recording_sink):
    src = tmp_path / "alarms.xlsx"
    build_workbook(
        src,
        [
            (1001, None, None),
            (1002, "Door open", "Existing advice"),
            (1003, "Sensor 4 timeout", None),
        ],
    )
    out = default_output_path(src)
    client = DummyClient({"Sensor 4 timeout": "Check sensor 4"})

    summary = run_alarm_job(src, out, SETTINGS, sink=recording_sink, client=client)

    assert (summary.processed, summary.skipped, summary.total) == (1, 2, 3)
    assert out.name == "alarms_AI.xlsx"
    assert read_answers(out) == [ANSWER_HEADER, None, "Existing advice", "Check sensor 4"]
    assert read_answers(src)[0] == "Answer"
    assert client.calls == ["Sensor 4 timeout"]


def test_job_without_answers_does_not_write_output(tmp_path):
    src = tmp_path / "alarms.xlsx"
    build_workbook(src, [(1, None, None)])
    out = tmp_path / "out.xlsx"
    summary = run_alarm_job(src, out, SETTINGS, client=DummyClient({}))
    assert summary.skipped == 1
    assert not out.exists()


def test_save_failure_surfaces_persistence_error(tmp_path, monkeypatch):
    src = tmp_path / "alarms.xlsx"
    build_workbook(src, [(1, "a", None), (2, "b", None)])

    def broken_save(self, path):
        raise PermissionError("file is locked")

    monkeypatch.setattr(AlarmSheet, "save", broken_save)
    client = DummyClient({"a": "x", "b": "y"})
    with pytest.raises(PersistenceError):
        run_alarm_job(src, tmp_path / "out.xlsx", SETTINGS, client=client)
    assert client.calls == ["a"]


def test_missing_input_is_rejected(tmp_path):
    with pytest.raises(InputError):
        run_alarm_job(tmp_path / "nope.xlsx", tmp_path / "out.xlsx", SETTINGS)


def test_output_equal_to_input_is_rejected(tmp_path):
    src = tmp_path / "alarms.xlsx"
    build_workbook(src, [(1, "a", None)])
    with pytest.raises(InputError):
        run_alarm_job(src, str(src), SETTINGS)
    with pytest.raises(InputError):
        run_alarm_job(src, "  ", SETTINGS)


def test_empty_sheet_is_rejected(tmp_path):
    src = tmp_path / "empty.xlsx"
    openpyxl.Workbook().save(src)
    with pytest.raises(InputError):
        run_alarm_job(src, tmp_path / "out.xlsx", SETTINGS, client=DummyClient({}))


def test_incomplete_settings_are_rejected(tmp_path):
    src = tmp_path / "alarms.xlsx"
    build_workbook(src, [(1, "a", None)])
    with pytest.raises(ConfigurationError):
        run_alarm_job(src, tmp_path / "out.xlsx", WorkflowSettings.create("", ""))


def test_job_builds_workflow_client_from_settings(tmp_path, monkeypatch):
    src = tmp_path / "alarms.xlsx"
    build_workbook(src, [(1, "a", None)])
    built = []

    def fake_client(settings):
        built.append(settings)
        return DummyClient({"a": "b"})

    monkeypatch.setattr(alarm_job, "WorkflowClient", fake_client)
    run_alarm_job(src, tmp_path / "out.xlsx", SETTINGS)
    assert built == [SETTINGS]
