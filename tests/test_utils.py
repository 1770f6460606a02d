from unittest.mock import MagicMock

import pytest
import requests

from assetpick import utils
from assetpick.utils import (
    format_size,
    get_effective_github_token,
    make_github_api_request,
    parse_repo_url,
)

pytestmark = [pytest.mark.unit, pytest.mark.supplier]


def _response(status_code=200, headers=None):
    response = MagicMock(status_code=status_code)
    response.headers = headers or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} error", response=response
        )
    return response


@pytest.fixture
def mock_session(mocker):
    session = MagicMock()
    mocker.patch("assetpick.utils._build_session", return_value=session)
    return session


@pytest.fixture(autouse=True)
def _reset_token_warning(monkeypatch):
    monkeypatch.setattr(utils, "_token_warning_shown", False)


class TestParseRepoUrl:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("BurntSushi/ripgrep", ("BurntSushi", "ripgrep")),
            ("  owner/repo  ", ("owner", "repo")),
            ("https://github.com/owner/repo", ("owner", "repo")),
            ("https://github.com/owner/repo/releases/tag/v1", ("owner", "repo")),
            ("http://github.com/owner/repo/", ("owner", "repo")),
            ("https://github.com/owner/repo.git", ("owner", "repo")),
            ("git@github.com:owner/my.repo.git", ("owner", "my.repo")),
        ],
    )
    def test_valid_references(self, text, expected):
        assert parse_repo_url(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "",
            None,
            "owner",
            "a/b/c",
            "https://gitlab.com/owner/repo",
            "https://github.com/owner",
            "own er/repo",
        ],
    )
    def test_invalid_references(self, text):
        assert parse_repo_url(text) is None


class TestFormatSize:
    @pytest.mark.parametrize(
        "num_bytes, expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.50 KB"),
            (2 * 1024**2, "2.00 MB"),
            (3 * 1024**3, "3.00 GB"),
            (1024**4, "1.00 TB"),
            (None, "0 B"),
            (-5, "0 B"),
        ],
    )
    def test_format(self, num_bytes, expected):
        assert format_size(num_bytes) == expected


class TestGithubToken:
    def test_explicit_token_wins(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env")
        assert get_effective_github_token("  mine  ") == "mine"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", " env ")
        assert get_effective_github_token(None) == "env"

    def test_env_fallback_disabled(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env")
        assert get_effective_github_token(None, allow_env_token=False) is None

    def test_no_token(self):
        assert get_effective_github_token("") is None


class TestMakeGithubApiRequest:
    def test_success_sends_headers(self, mock_session):
        mock_session.get.return_value = _response()

        response = make_github_api_request(
            "https://api.github.com/repos/o/r/releases", "tok", params={"per_page": 2}
        )

        assert response is mock_session.get.return_value
        kwargs = mock_session.get.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "token tok"
        assert kwargs["headers"]["User-Agent"].startswith("assetpick/")
        assert kwargs["params"] == {"per_page": 2}
        assert kwargs["timeout"] == 10
        mock_session.close.assert_called_once()

    def test_unauthenticated_request(self, mock_session):
        mock_session.get.return_value = _response()
        make_github_api_request("https://api.github.com/x", None, allow_env_token=False)
        assert "Authorization" not in mock_session.get.call_args.kwargs["headers"]

    def test_401_retries_without_token(self, mock_session):
        mock_session.get.side_effect = [_response(401), _response(200)]

        response = make_github_api_request("https://api.github.com/x", "bad")

        assert response.status_code == 200
        assert mock_session.get.call_count == 2
        second_headers = mock_session.get.call_args_list[1].kwargs["headers"]
        assert "Authorization" not in second_headers

    def test_401_without_token_raises(self, mock_session):
        mock_session.get.return_value = _response(401)
        with pytest.raises(requests.HTTPError):
            make_github_api_request("https://api.github.com/x", None, allow_env_token=False)
        assert mock_session.get.call_count == 1

    def test_rate_limit_message(self, mock_session):
        mock_session.get.return_value = _response(
            403, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}
        )
        with pytest.raises(requests.HTTPError, match="rate limit exceeded") as exc_info:
            make_github_api_request("https://api.github.com/x")
        assert "2023-11-14 22:13:20 UTC" in str(exc_info.value)

    def test_rate_limit_with_malformed_reset_header(self, mock_session):
        mock_session.get.return_value = _response(
            403, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "soon"}
        )
        with pytest.raises(requests.HTTPError, match="Resets at unknown"):
            make_github_api_request("https://api.github.com/x")

    def test_forbidden_without_rate_limit(self, mock_session):
        mock_session.get.return_value = _response(403, {"X-RateLimit-Remaining": "12"})
        with pytest.raises(requests.HTTPError, match="access forbidden"):
            make_github_api_request("https://api.github.com/x")

    def test_low_rate_limit_warns(self, mock_session, mocker):
        mock_session.get.return_value = _response(200, {"X-RateLimit-Remaining": "3"})
        mock_logger = mocker.patch("assetpick.utils.logger")
        make_github_api_request("https://api.github.com/x")
        assert any(
            "running low" in call.args[0] for call in mock_logger.warning.call_args_list
        )

    def test_network_errors_propagate(self, mock_session):
        mock_session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(requests.ConnectionError):
            make_github_api_request("https://api.github.com/x")
        mock_session.close.assert_called_once()


def test_build_session_mounts_retrying_adapter():
    session = utils._build_session()
    adapter = session.get_adapter("https://api.github.com")
    assert adapter.max_retries.total == 3
    assert 503 in adapter.max_retries.status_forcelist
    session.close()
