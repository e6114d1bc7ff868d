"""Security settings protecting the dashboard and its API."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["BasicConfig", "OIDCConfig", "SecurityConfig"]

COOKIE_NAME_STATE = "gatus_state"
COOKIE_NAME_NONCE = "gatus_nonce"
COOKIE_NAME_SESSION = "gatus_session"
CALLBACK_PATH = "/authorization-code/callback"


@dataclass
class BasicConfig:
    """Settings for HTTP basic authentication."""

    username: str = ""
    password_bcrypt_hash_base64_encoded: str = ""

    def is_valid(self) -> bool:
        """Whether both a username and a password hash are set."""
        return bool(self.username) and bool(self.password_bcrypt_hash_base64_encoded)


@dataclass
class OIDCConfig:
    """Settings for OpenID Connect authentication."""

    issuer_url: str = ""
    redirect_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    scopes: list[str] = field(default_factory=list)
    allowed_subjects: list[str] = field(default_factory=list)

    def is_valid(self) -> bool:
        """Whether every setting needed to run the login flow is present."""
        return (
            bool(self.issuer_url)
            and bool(self.redirect_url)
            and self.redirect_url.endswith(CALLBACK_PATH)
            and bool(self.client_id)
            and bool(self.client_secret)
            and bool(self.scopes)
        )


@dataclass
class SecurityConfig:
    """The security configuration: basic authentication, OIDC, or neither."""

    basic: BasicConfig | None = None
    oidc: OIDCConfig | None = None

    def is_valid(self) -> bool:
        """Whether at least one configured authentication method is valid."""
        return (self.basic is not None and self.basic.is_valid()) or (
            self.oidc is not None and self.oidc.is_valid()
        )