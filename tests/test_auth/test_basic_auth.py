"""Tests for login/password authentication."""

from __future__ import annotations

from unittest.mock import MagicMock, call

import httpx
import pytest

from shiftauth.auth.base import LAZY_AUTH
from shiftauth.auth.basic import BasicAuth, Credential, CredentialOrigin
from shiftauth.models import AuthOptions


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        request=httpx.Request("GET", "https://broker.example.com/broker/rest/domains"),
        **kwargs,
    )


def _answer(output: MagicMock, user: str = "dev", password: str = "secret") -> None:
    """Make output.ask answer the login and password prompts."""
    output.ask.side_effect = lambda prompt, hide_input=False: password if hide_input else user


class TestCredential:
    def test_default_is_unset(self) -> None:
        cred = Credential()
        assert cred.value is None
        assert cred.origin is CredentialOrigin.UNSET
        assert not cred.known
        assert not cred.trusted

    def test_configured_none_stays_unset(self) -> None:
        assert Credential.configured(None) == Credential()

    def test_configured_value_is_trusted(self) -> None:
        cred = Credential.configured("dev")
        assert cred.known
        assert cred.trusted

    def test_prompted_value_is_not_trusted(self) -> None:
        cred = Credential("dev", CredentialOrigin.PROMPTED)
        assert cred.known
        assert not cred.trusted


class TestDefaults:
    def test_nothing_configured(self, output: MagicMock) -> None:
        auth = BasicAuth(output=output)
        assert auth.username is None
        assert auth.password is None
        assert not auth.has_username()
        assert auth.can_authenticate() is False
        assert auth.openshift_server == "openshift.redhat.com"

    def test_server_from_options(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(server="test.com"), output)
        assert auth.openshift_server == "test.com"

    def test_login_from_options(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo"), output)
        assert auth.username == "foo"
        assert auth.has_username()

    def test_explicit_values_override_options(self, output: MagicMock) -> None:
        auth = BasicAuth(
            AuthOptions(login="foo", password="bar"), output, username="a", password="b"
        )
        assert auth.username == "a"
        assert auth.password == "b"

    def test_messages(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(server="test.com"), output)
        assert auth.expired_token_message() == (
            "Your authorization token has expired. Please sign in now to continue on test.com."
        )
        assert auth.get_token_message() == "Please sign in to start a new session to test.com."


class TestCanAuthenticate:
    def test_username_and_password(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", password="bar"), output)
        assert auth.can_authenticate() is True

    def test_username_only_with_prompting(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo"), output)
        assert auth.can_authenticate() is True

    def test_username_only_without_prompting(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", noprompt=True), output)
        assert auth.can_authenticate() is False

    def test_password_only(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(password="bar"), output)
        assert auth.can_authenticate() is False

    def test_never_prompts(self, output: MagicMock) -> None:
        BasicAuth(output=output).can_authenticate()
        output.ask.assert_not_called()


class TestPrompts:
    def test_ask_username(self, output: MagicMock) -> None:
        output.ask.return_value = "foo"
        auth = BasicAuth(AuthOptions(server="test.com"), output)

        assert auth.ask_username() == "foo"
        output.ask.assert_called_once_with("Login to test.com: ")
        assert auth.username == "foo"

    def test_ask_password_hides_input(self, output: MagicMock) -> None:
        output.ask.return_value = "bar"
        auth = BasicAuth(output=output)

        assert auth.ask_password() == "bar"
        output.ask.assert_called_once_with("Password: ", hide_input=True)
        assert auth.password == "bar"

    def test_noprompt_never_asks(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(noprompt=True), output)
        assert auth.ask_username() is None
        assert auth.ask_password() is None
        output.ask.assert_not_called()


class TestToRequest:
    def test_configured_credentials(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", password="bar"), output)
        request = {"method": "GET", "path": "/domains"}

        result = auth.to_request(request)

        assert result is request
        assert result == {"method": "GET", "path": "/domains", "user": "foo", "password": "bar"}
        output.ask.assert_not_called()

    def test_lazy_request_with_nothing_known(self, output: MagicMock) -> None:
        auth = BasicAuth(output=output)
        request = {LAZY_AUTH: True}

        assert auth.to_request(request) == {LAZY_AUTH: True}
        output.ask.assert_not_called()

    def test_lazy_request_with_partial_credentials(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo"), output)

        assert auth.to_request({LAZY_AUTH: True}) == {LAZY_AUTH: True}
        output.ask.assert_not_called()

    def test_lazy_request_with_both_known(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", password="bar"), output)

        assert auth.to_request({LAZY_AUTH: True}) == {
            LAZY_AUTH: True,
            "user": "foo",
            "password": "bar",
        }

    def test_prompts_for_missing_password(self, output: MagicMock) -> None:
        output.ask.return_value = "bar"
        auth = BasicAuth(AuthOptions(login="foo"), output)

        assert auth.to_request({}) == {"user": "foo", "password": "bar"}
        output.ask.assert_called_once_with("Password: ", hide_input=True)

    def test_prompted_password_is_remembered(self, output: MagicMock) -> None:
        output.ask.return_value = "bar"
        auth = BasicAuth(AuthOptions(login="foo"), output)

        auth.to_request({})
        assert auth.to_request({}) == {"user": "foo", "password": "bar"}
        assert output.ask.call_count == 1

    def test_prompts_for_username_and_password(self, output: MagicMock) -> None:
        _answer(output, "foo", "bar")
        auth = BasicAuth(AuthOptions(server="test.com"), output)

        assert auth.to_request({}) == {"user": "foo", "password": "bar"}
        assert output.ask.call_args_list == [
            call("Login to test.com: "),
            call("Password: ", hide_input=True),
        ]

    def test_existing_request_values_win(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", password="bar"), output)

        assert auth.to_request({"user": "other"}) == {"user": "other", "password": "bar"}

    def test_noprompt_leaves_values_empty(self, output: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", noprompt=True), output)

        assert auth.to_request({}) == {"user": "foo", "password": None}
        output.ask.assert_not_called()


class TestRetryAuth:
    @pytest.mark.parametrize("status", [200, 403, 404, 500])
    def test_non_401_is_not_retried(self, status: int, output: MagicMock, client: MagicMock) -> None:
        auth = BasicAuth(output=output)
        assert auth.retry_auth(_response(status), client) is False
        output.ask.assert_not_called()

    def test_ignores_cookies_on_success(self, output: MagicMock, client: MagicMock) -> None:
        auth = BasicAuth(output=output)
        response = _response(200, headers={"set-cookie": "rh_sso=1"})
        assert auth.retry_auth(response, client) is False

    def test_nothing_known_prompts_for_both(self, output: MagicMock, client: MagicMock) -> None:
        _answer(output, "foo", "bar")
        auth = BasicAuth(output=output)

        assert auth.retry_auth(_response(401), client) is True
        assert auth.username == "foo"
        assert auth.password == "bar"
        output.error.assert_not_called()

    def test_configured_username_only_asks_password(
        self, output: MagicMock, client: MagicMock
    ) -> None:
        output.ask.return_value = "bar"
        auth = BasicAuth(AuthOptions(login="foo"), output)

        assert auth.retry_auth(_response(401), client) is True
        output.ask.assert_called_once_with("Password: ", hide_input=True)
        assert auth.username == "foo"

    def test_prompted_password_is_asked_again(
        self, output: MagicMock, client: MagicMock
    ) -> None:
        output.ask.return_value = "bar"
        auth = BasicAuth(AuthOptions(login="foo"), output)

        assert auth.retry_auth(_response(401), client) is True
        assert auth.retry_auth(_response(401), client) is True
        assert output.ask.call_count == 2
        output.error.assert_called_once_with("Username or password is not correct")

    def test_configured_pair_is_not_retried(self, output: MagicMock, client: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", password="bar"), output)

        assert auth.retry_auth(_response(401), client) is False
        output.error.assert_called_once_with("Username or password is not correct")
        output.ask.assert_not_called()

    def test_configured_password_only_asks_username(
        self, output: MagicMock, client: MagicMock
    ) -> None:
        output.ask.return_value = "foo"
        auth = BasicAuth(AuthOptions(password="bar", server="test.com"), output)

        assert auth.retry_auth(_response(401), client) is True
        output.ask.assert_called_once_with("Login to test.com: ")

    def test_noprompt_is_not_retried(self, output: MagicMock, client: MagicMock) -> None:
        auth = BasicAuth(AuthOptions(login="foo", noprompt=True), output)

        assert auth.retry_auth(_response(401), client) is False
        output.ask.assert_not_called()

    def test_never_touches_session_client(self, output: MagicMock, client: MagicMock) -> None:
        _answer(output)
        BasicAuth(output=output).retry_auth(_response(401), client)
        client.supports_sessions.assert_not_called()
        client.new_session.assert_not_called()
