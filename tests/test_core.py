"""
Tests for simple_odata.core module.
"""

import pytest
from unittest.mock import Mock, patch, MagicMock

from simple_odata.core.session import (
    HttpConfig,
    HttpSession,
    ODataResponse,
    ODataUpstreamError,
)
from simple_odata.core.connection import ConnectionContext
from simple_odata.odata.params import GenericAuth, SubscriptionAuth


def _response(status=200, json_body=None, text="", headers=None, url="https://api.test/items"):
    r = Mock()
    r.status_code = status
    r.headers = headers or {"Content-Type": "application/json"}
    r.url = url
    r.text = text
    r.content = text.encode() if text else b"{}"
    if json_body is None:
        r.json.side_effect = ValueError("not json")
    else:
        r.json.return_value = json_body
    return r


class TestHttpConfig:
    """Tests for HttpConfig dataclass."""

    def test_default_values(self):
        cfg = HttpConfig()
        assert cfg.timeout == 60.0
        assert cfg.verify is True
        assert cfg.user_agent.startswith("simple-odata/")

    def test_custom_values(self):
        cfg = HttpConfig(timeout=5.0, verify="/etc/ca.pem", user_agent="me/1")
        assert cfg.timeout == 5.0
        assert cfg.verify == "/etc/ca.pem"
        assert cfg.user_agent == "me/1"


class TestODataUpstreamError:
    """Tests for ODataUpstreamError exception."""

    def test_error_attributes(self):
        err = ODataUpstreamError(
            status=404,
            body="Not found",
            url="https://api.test/items",
            headers={"x-request-id": "123"},
        )
        assert err.status == 404
        assert err.body == "Not found"
        assert err.url == "https://api.test/items"
        assert err.headers == {"x-request-id": "123"}

    def test_error_message_truncation(self):
        long_body = "x" * 2000
        err = ODataUpstreamError(500, long_body, "https://api.test")
        assert len(str(err)) < 1500


class TestHttpSession:
    """Tests for HttpSession."""

    @patch("simple_odata.core.session.requests.Session")
    def test_session_default_headers(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        HttpSession(HttpConfig(user_agent="ua/1"))

        sent = mock_session.headers.update.call_args[0][0]
        assert sent["User-Agent"] == "ua/1"
        assert "application/json" in sent["Accept"]

    @patch("simple_odata.core.session.requests.Session")
    def test_request_decodes_json(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response(json_body={"value": [1, 2]}, text='{"value":[1,2]}')

        sess = HttpSession(HttpConfig(timeout=7.0, verify=False))
        resp = sess.request("GET", "https://api.test/items?$top=2", headers={"A": "b"})

        assert isinstance(resp, ODataResponse)
        assert resp.status == 200
        assert resp.data == {"value": [1, 2]}
        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://api.test/items?$top=2"
        assert kwargs["headers"] == {"A": "b"}
        assert kwargs["timeout"] == 7.0
        assert kwargs["verify"] is False
        assert kwargs["stream"] is False

    @patch("simple_odata.core.session.requests.Session")
    def test_json_falls_back_to_text(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response(text="plain body")

        resp = HttpSession().request("GET", "https://api.test/items")
        assert resp.data == "plain body"

    @patch("simple_odata.core.session.requests.Session")
    def test_text_and_bytes_response_types(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response(text="abc")

        sess = HttpSession()
        assert sess.request("GET", "https://api.test", response_type="text").data == "abc"
        assert sess.request("GET", "https://api.test", response_type="arraybuffer").data == b"abc"

    @patch("simple_odata.core.session.requests.Session")
    def test_stream_response_type(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        raw = _response(text="abc")
        mock_session.request.return_value = raw

        resp = HttpSession().request("GET", "https://api.test", response_type="stream")
        assert resp.data is raw.raw
        assert mock_session.request.call_args.kwargs["stream"] is True

    @patch("simple_odata.core.session.requests.Session")
    def test_unknown_response_type_raises(self, mock_session_class):
        mock_session_class.return_value = MagicMock()
        with pytest.raises(ValueError, match="response_type"):
            HttpSession().request("GET", "https://api.test", response_type="xml")

    @patch("simple_odata.core.session.requests.Session")
    def test_error_status_raises_upstream_error(self, mock_session_class, sample_error_body):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response(
            status=400, json_body=sample_error_body, text="raw"
        )

        with pytest.raises(ODataUpstreamError) as excinfo:
            HttpSession().request("GET", "https://api.test/items")

        err = excinfo.value
        assert err.status == 400
        assert err.url == "https://api.test/items"
        assert "code=BadRequest" in err.body
        assert "Property 'Nope' does not exist" in err.body

    @patch("simple_odata.core.session.requests.Session")
    def test_error_without_odata_payload_keeps_text(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response(status=503, text="Service Unavailable")

        with pytest.raises(ODataUpstreamError) as excinfo:
            HttpSession().request("GET", "https://api.test/items")
        assert excinfo.value.body == "Service Unavailable"

    @patch("simple_odata.core.session.requests.Session")
    def test_transport_errors_propagate(self, mock_session_class):
        import requests

        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(requests.ConnectionError):
            HttpSession().request("GET", "https://api.test/items")

    @patch("simple_odata.core.session.requests.Session")
    def test_context_manager(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        with HttpSession() as sess:
            assert sess is not None

        mock_session.close.assert_called_once()


class TestConnectionContext:
    """Tests for ConnectionContext."""

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_api_root_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Missing api_root"):
            ConnectionContext(env_file=tmp_path / "missing.env")

    @patch.dict("os.environ", {}, clear=True)
    def test_token_and_subscription_are_exclusive(self, tmp_path):
        with pytest.raises(ValueError, match="exclusive"):
            ConnectionContext(
                api_root="https://api.test",
                token="t",
                subscription_key="abc",
                env_file=tmp_path / "missing.env",
            )

    @patch.dict("os.environ", {
        "ODATA_API_ROOT": "https://env.test/odata/",
        "ODATA_BEARER_TOKEN": "envtoken",
        "ODATA_VERIFY_TLS": "false",
        "ODATA_TIMEOUT": "15",
    }, clear=True)
    def test_reads_from_environment(self, tmp_path):
        conn = ConnectionContext(env_file=tmp_path / "missing.env")
        assert conn.api_root == "https://env.test/odata"
        assert conn.verify is False
        assert conn.timeout == 15.0

        client = conn.client()
        assert isinstance(client.auth, GenericAuth)
        assert client.build_headers() == {"Authorization": "Bearer envtoken"}
        conn.close()

    @patch.dict("os.environ", {}, clear=True)
    def test_loads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "ODATA_API_ROOT=https://dotenv.test\n"
            "ODATA_SUBSCRIPTION_KEY=abc\n"
            "ODATA_SUBSCRIPTION_KEY_NAME=key\n"
            "ODATA_API_VERSION=2021\n"
        )

        with ConnectionContext(env_file=env_file) as conn:
            client = conn.client()
            assert conn.api_root == "https://dotenv.test"
            assert isinstance(client.auth, SubscriptionAuth)
            assert client.build_query_string() == "?key=abc&api-version=2021"

    @patch.dict("os.environ", {"ODATA_API_ROOT": "https://env.test"}, clear=True)
    def test_explicit_params_override_env(self, tmp_path):
        conn = ConnectionContext(
            api_root="https://explicit.test/",
            timeout=3,
            verify=True,
            env_file=tmp_path / "missing.env",
        )
        assert conn.api_root == "https://explicit.test"
        assert conn.timeout == 3.0
        assert conn.verify is True

    @patch.dict("os.environ", {}, clear=True)
    def test_clients_share_session(self, tmp_path):
        conn = ConnectionContext(api_root="https://api.test", env_file=tmp_path / "missing.env")
        first = conn.client().endpoint("a")
        second = conn.client()

        assert first.session is second.session
        assert second.build_path() == "https://api.test"

        conn.close()
        assert conn._session is None
