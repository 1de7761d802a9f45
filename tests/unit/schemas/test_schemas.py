"""Unit tests for OAuth value objects."""

import pytest
from datetime import datetime, timedelta
from pydantic import ValidationError

from oauth_broker.schemas.oauth import OAuthTokenData, TokenResponse, redact_payload
from oauth_broker.schemas.platform import PlatformConfig, PlatformId, normalize_scopes


@pytest.mark.unit
class TestPlatformId:
    def test_parse_known(self):
        assert PlatformId.parse("google_analytics") is PlatformId.GOOGLE_ANALYTICS

    @pytest.mark.parametrize("raw", [None, "", "Spotify", "myspace"])
    def test_parse_unknown(self, raw):
        assert PlatformId.parse(raw) is None

    def test_members(self):
        assert {p.value for p in PlatformId} == {
            "spotify",
            "youtube",
            "facebook",
            "instagram",
            "twitter",
            "tiktok",
            "google_analytics",
        }


@pytest.mark.unit
class TestNormalizeScopes:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, []),
            ("a b", ["a", "b"]),
            ("a,b , c", ["a", "b", "c"]),
            (["a", " b ", ""], ["a", "b"]),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_scopes(value) == expected

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            normalize_scopes(42)

    def test_platform_config_requires_credentials(self):
        with pytest.raises(ValidationError):
            PlatformConfig(platform_id="spotify", client_id="", client_secret="s", redirect_uri="r")


@pytest.mark.unit
class TestTokenResponse:
    def test_from_flat_payload(self):
        token = TokenResponse.from_payload({"access_token": "a", "expires_in": "bogus", "token_type": "bearer"})

        assert token.access_token == "a"
        assert token.expires_in is None
        assert token.token_type == "bearer"

    def test_top_level_token_wins_over_data(self):
        token = TokenResponse.from_payload({"access_token": "top", "data": {"access_token": "nested"}})

        assert token.access_token == "top"

    def test_missing_access_token_is_invalid(self):
        with pytest.raises(ValidationError):
            TokenResponse.from_payload({"token_type": "Bearer"})


@pytest.mark.unit
class TestRedactPayload:
    def test_removes_token_values_one_level_deep(self):
        payload = {
            "access_token": "a",
            "refresh_token": "r",
            "expires_in": 10,
            "data": {"access_token": "a", "open_id": "o"},
        }

        assert redact_payload(payload) == {"expires_in": 10, "data": {"open_id": "o"}}

    def test_input_is_not_mutated(self):
        payload = {"access_token": "a"}

        redact_payload(payload)

        assert payload == {"access_token": "a"}


@pytest.mark.unit
class TestOAuthTokenData:
    def test_is_expired_is_strict(self):
        moment = datetime(2026, 1, 1, 12, 0)
        token = OAuthTokenData(user_id="u", platform_id="spotify", access_token="a", expires_at=moment)

        assert token.is_expired(moment) is False
        assert token.is_expired(moment + timedelta(seconds=1)) is True

    def test_no_expiry_never_expires(self):
        token = OAuthTokenData(user_id="u", platform_id="spotify", access_token="a")

        assert token.is_expired(datetime(2999, 1, 1)) is False
