# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from unittest.mock import Mock, patch

import pytest
import requests

from dataverse_schema.core._http import _HttpClient


class TestHttpClient:
    def test_default_configuration(self):
        client = _HttpClient()
        assert client.max_attempts == 1
        assert client.base_delay == 0.5
        assert client.default_timeout is None

    @patch("requests.request")
    def test_method_dependent_timeouts(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        client = _HttpClient()

        client._request("get", "https://test.example.com")
        client._request("post", "https://test.example.com")

        assert mock_request.call_args_list[0].kwargs["timeout"] == 10
        assert mock_request.call_args_list[1].kwargs["timeout"] == 120

    @patch("requests.request")
    def test_configured_timeout_wins(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient(timeout=3)._request("delete", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 3

    @patch("requests.request")
    @patch("time.sleep")
    def test_network_error_retry(self, mock_sleep, mock_request):
        mock_request.side_effect = [
            requests.exceptions.ConnectionError("Network error"),
            requests.exceptions.ConnectionError("Network error"),
            Mock(status_code=200),
        ]

        response = _HttpClient(retries=3)._request("get", "https://test.example.com")

        assert response.status_code == 200
        assert mock_request.call_count == 3
        mock_sleep.assert_any_call(0.5)
        mock_sleep.assert_any_call(1.0)

    @patch("requests.request")
    @patch("time.sleep")
    def test_last_network_error_is_raised(self, mock_sleep, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("Network error")
        with pytest.raises(requests.exceptions.ConnectionError):
            _HttpClient(retries=2, backoff=0.1)._request("get", "https://test.example.com")
        assert mock_request.call_count == 2
        mock_sleep.assert_called_once_with(0.1)

    @patch("requests.request")
    def test_http_errors_are_not_retried(self, mock_request):
        mock_request.return_value = Mock(status_code=503)
        response = _HttpClient(retries=3)._request("get", "https://test.example.com")
        assert response.status_code == 503
        assert mock_request.call_count == 1

    def test_session_is_used_and_closed(self):
        session = Mock()
        session.request.return_value = Mock(status_code=200)
        client = _HttpClient(session=session)

        client._request("get", "https://test.example.com", headers={"A": "b"})
        client.close()
        client.close()

        session.request.assert_called_once_with("get", "https://test.example.com", headers={"A": "b"}, timeout=10)
        session.close.assert_called_once()
