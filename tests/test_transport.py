"""Tests for the retrying HTTP transport"""
import asyncio

import httpx
import pytest

from core.api_client import ResilientTransport
from core.errors import TransportError
from fakes import FakeClock

URL = "http://backend.test/rest/v1/profiles"


def scripted(statuses):
    """MockTransport answering with the given status codes in order; records requests"""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status = statuses[min(len(calls), len(statuses)) - 1]
        return httpx.Response(status, json={"status": status})

    return httpx.MockTransport(handler), calls


def make_transport(mock, clock=None, **kwargs):
    clock = clock or FakeClock()
    return ResilientTransport(
        timeout=kwargs.pop("timeout", 10.0),
        retry_count=kwargs.pop("retry_count", 2),
        retry_delay=kwargs.pop("retry_delay", 1.0),
        transport=mock,
        sleep=clock.sleep,
        **kwargs
    ), clock


class TestRetryPolicy:
    """Which responses are retried and how often"""

    def test_success_on_third_attempt_after_backoff(self):
        """500, 500, 200 succeeds after waiting 1s then 2s"""
        mock, calls = scripted([500, 500, 200])
        transport, clock = make_transport(mock)
        start = clock()

        response = transport.send("GET", URL)

        assert response.status_code == 200
        assert len(calls) == 3
        assert clock.sleeps == [1.0, 2.0]
        assert clock() - start >= 3000, "At least 3s of backoff before success"

    def test_client_error_not_retried(self):
        """404 is returned immediately"""
        mock, calls = scripted([404, 200])
        transport, clock = make_transport(mock)

        response = transport.send("GET", URL)

        assert response.status_code == 404
        assert len(calls) == 1
        assert clock.sleeps == []

    def test_success_not_retried(self):
        mock, calls = scripted([201])
        transport, clock = make_transport(mock)

        assert transport.send("POST", URL, json={"a": 1}).status_code == 201
        assert len(calls) == 1

    @pytest.mark.parametrize("status", [400, 401, 403, 409, 422, 429])
    def test_all_4xx_returned_without_retry(self, status):
        mock, calls = scripted([status, 200])
        transport, _ = make_transport(mock)

        assert transport.send("GET", URL).status_code == status
        assert len(calls) == 1

    def test_server_errors_exhaust_retries(self):
        """Three 503s raise a single aggregated TransportError"""
        mock, calls = scripted([503])
        transport, clock = make_transport(mock)

        with pytest.raises(TransportError) as exc_info:
            transport.send("GET", URL)

        error = exc_info.value
        assert len(calls) == 3
        assert error.attempts == 3
        assert "503" in error.last_error
        assert str(error).startswith("Connection failed after 3 attempts.")
        assert clock.sleeps == [1.0, 2.0], "No sleep after the final attempt"

    def test_retry_count_zero_means_single_attempt(self):
        mock, calls = scripted([500])
        transport, clock = make_transport(mock, retry_count=0)

        with pytest.raises(TransportError):
            transport.send("GET", URL)
        assert len(calls) == 1
        assert clock.sleeps == []


class TestTransportExceptions:
    """Connection failures and timeouts"""

    def test_connect_error_retried_then_succeeds(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(200, json=[])

        transport, clock = make_transport(httpx.MockTransport(handler))

        assert transport.send("GET", URL).status_code == 200
        assert len(attempts) == 2
        assert clock.sleeps == [1.0]

    def test_connect_errors_exhaust_with_last_message(self):
        def handler(request):
            raise httpx.ConnectError("Failed to fetch", request=request)

        transport, _ = make_transport(httpx.MockTransport(handler))

        with pytest.raises(TransportError) as exc_info:
            transport.send("GET", URL)
        assert exc_info.value.last_error == "Failed to fetch"
        assert "Connection failed after 3 attempts. Failed to fetch" == str(exc_info.value)

    def test_httpx_timeout_is_retryable(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200)

        transport, _ = make_transport(httpx.MockTransport(handler))

        assert transport.send("GET", URL).status_code == 200
        assert len(attempts) == 3

    def test_attempt_exceeding_timeout_is_aborted(self):
        """A hanging attempt is cut off by the per-attempt timeout and retried"""
        attempts = []

        async def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                await asyncio.sleep(5)
            return httpx.Response(200)

        transport, _ = make_transport(httpx.MockTransport(handler), timeout=0.05)

        assert transport.send("GET", URL).status_code == 200
        assert len(attempts) == 2

    def test_unexpected_exception_propagates(self):
        """Only transport-level failures are retried"""
        attempts = []

        def handler(request):
            attempts.append(request)
            raise ValueError("bad handler")

        transport, _ = make_transport(httpx.MockTransport(handler))

        with pytest.raises(ValueError):
            transport.send("GET", URL)
        assert len(attempts) == 1


class TestRequestOptions:
    def test_headers_and_json_forwarded(self):
        seen = {}

        def handler(request):
            seen["apikey"] = request.headers.get("apikey")
            seen["body"] = request.content
            return httpx.Response(201)

        transport, _ = make_transport(httpx.MockTransport(handler), headers={"apikey": "k"})

        asyncio.run(transport.async_send("POST", URL, json={"name": "Luna"}))

        assert seen["apikey"] == "k"
        assert b"Luna" in seen["body"]

    def test_max_attempts(self):
        transport, _ = make_transport(httpx.MockTransport(lambda r: httpx.Response(200)), retry_count=2)
        assert transport.max_attempts == 3
