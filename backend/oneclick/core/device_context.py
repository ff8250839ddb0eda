"""Device Context — client/device metadata captured when an inscription is created.

Invariants:
    - Raw user-agent is always stored verbatim (ua_raw), parsed fields are best-effort
    - Unknown browser/OS families are stored as None, never as the parser's "Other"
"""

from dataclasses import dataclass

from user_agents import parse as parse_user_agent

_UNKNOWN_FAMILY = "Other"


@dataclass(frozen=True)
class DeviceContext:
    """Device signal provided by the transport layer."""
    user_agent: str = ""
    ip: str | None = None

    @property
    def has_user_agent(self) -> bool:
        return bool(self.user_agent and self.user_agent.strip())


def _family(value: str | None) -> str | None:
    if not value or value == _UNKNOWN_FAMILY:
        return None
    return value


def build_client_metadata(device: DeviceContext) -> dict:
    """Parse the user-agent into the `client` document stored on the inscription."""
    ua = parse_user_agent(device.user_agent)
    version = ua.browser.version
    return {
        "browser": {
            "name": _family(ua.browser.family),
            "version": ua.browser.version_string or None,
            "major": str(version[0]) if version else None,
        },
        "os": _family(ua.os.family),
        "ua_raw": device.user_agent,
        "ip": device.ip,
    }
