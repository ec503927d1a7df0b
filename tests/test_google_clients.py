# tests/test_google_clients.py
"""
Tests de los clientes delgados sobre googleapiclient usando servicios mock.
"""
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from app.domain.errors import RemoteCallError
from app.domain.script_project import ScriptFile
from app.integrations.drive_client import SCRIPT_MIME_TYPE, DriveClient, escape_query_value
from app.integrations.google_client import execute
from app.integrations.script_client import ScriptClient
from app.integrations.sheets_client import SheetsClient, col_letter_to_number, col_number_to_letter


def http_error(status: int, message: str) -> HttpError:
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode("utf-8")
    return HttpError(httplib2.Response({"status": status}), content)


class TestExecute:
    """Tests para la conversión de errores de transporte."""

    def test_returns_response_and_passes_retries(self):
        request = MagicMock()
        request.execute.return_value = {"ok": True}

        assert execute(request, num_retries=3) == {"ok": True}
        request.execute.assert_called_once_with(num_retries=3)

    def test_http_error_keeps_status(self):
        request = MagicMock()
        request.execute.side_effect = http_error(404, "Requested entity was not found.")

        with pytest.raises(RemoteCallError) as exc_info:
            execute(request)

        assert exc_info.value.status_code == 404
        assert "Requested entity was not found." in str(exc_info.value)

    def test_socket_errors_are_transport_errors(self):
        request = MagicMock()
        request.execute.side_effect = TimeoutError("timed out")

        with pytest.raises(RemoteCallError, match="Transport error") as exc_info:
            execute(request)

        assert exc_info.value.status_code is None

    def test_uses_thread_http_when_given(self):
        request = MagicMock()
        http = object()

        execute(request, num_retries=1, http=http)

        request.execute.assert_called_once_with(num_retries=1, http=http)


class TestSheetsClient:
    def test_get_values_stringifies_cells(self):
        service = MagicMock()
        service.spreadsheets().values().get().execute.return_value = {"values": [["T1", 5], ["T2"]]}

        rows = SheetsClient(service).get_values("SRC", "'Sheet Id'!D2:G")

        assert rows == [["T1", "5"], ["T2"]]

    def test_get_sheet_titles(self):
        service = MagicMock()
        service.spreadsheets().get().execute.return_value = {
            "sheets": [{"properties": {"title": "Sheet Id"}}, {"properties": {"title": "Other"}}]
        }
        client = SheetsClient(service)

        assert client.get_sheet_titles("SRC") == ["Sheet Id", "Other"]
        assert client.sheet_exists("SRC", "Other") is True

    @pytest.mark.parametrize("letter, number", [("A", 1), ("Z", 26), ("AA", 27), ("AZ", 52)])
    def test_column_conversion(self, letter, number):
        assert col_letter_to_number(letter) == number
        assert col_number_to_letter(number) == letter


class TestDriveClient:
    def test_follows_pagination(self):
        service = MagicMock()
        service.files().list().execute.side_effect = [
            {"files": [{"id": "a"}], "nextPageToken": "p2"},
            {"files": [{"id": "b"}]},
        ]

        children = DriveClient(service).list_children("T1", SCRIPT_MIME_TYPE)

        assert [c["id"] for c in children] == ["a", "b"]
        _, kwargs = service.files().list.call_args
        assert kwargs["q"] == (
            "'T1' in parents and mimeType='application/vnd.google-apps.script' and trashed=false"
        )
        assert kwargs["pageToken"] == "p2"

    def test_escapes_quotes(self):
        assert escape_query_value("it's") == "it\\'s"


class TestScriptClient:
    def test_get_content_builds_project(self):
        service = MagicMock()
        service.projects().getContent().execute.return_value = {
            "scriptId": "abc",
            "files": [{"name": "Code", "type": "SERVER_JS", "source": "function x(){}"}],
        }

        project = ScriptClient(service).get_content("abc")

        assert project.find("Code").source == "function x(){}"

    def test_update_content_sends_all_files(self):
        service = MagicMock()
        service.projects().updateContent().execute.return_value = {"scriptId": "abc"}
        files = [ScriptFile("Code", "SERVER_JS", "x"), ScriptFile("appsscript", "JSON", "{}")]

        ScriptClient(service).update_content("abc", files)

        _, kwargs = service.projects().updateContent.call_args
        assert kwargs == {"scriptId": "abc", "body": {"files": [f.to_api() for f in files]}}

    def test_run_function_body(self):
        service = MagicMock()
        service.scripts().run().execute.return_value = {"done": True}

        ScriptClient(service).run_function("abc", "placeButtonsFromSync")

        _, kwargs = service.scripts().run.call_args
        assert kwargs == {"scriptId": "abc", "body": {"function": "placeButtonsFromSync", "devMode": True}}

    def test_errors_propagate_as_remote_call_error(self):
        service = MagicMock()
        service.projects().get().execute.side_effect = http_error(403, "The caller does not have permission")

        with pytest.raises(RemoteCallError) as exc_info:
            ScriptClient(service).get_metadata("abc")

        assert exc_info.value.status_code == 403
