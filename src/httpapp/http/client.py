"""
Client detection from the server environment.

Only the two facts the response engine needs are derived: which
rendering engine the browser uses (for the legacy redirect fallback)
and which content encodings it accepts (for compression).
"""

from typing import List, Mapping, Union

from .uri import ServerEnvironment


class WebClient:
    """Rendering engines and client detection."""

    UNKNOWN = "unknown"
    TRIDENT = "trident"
    EDGE = "edge"
    BLINK = "blink"
    WEBKIT = "webkit"
    GECKO = "gecko"
    PRESTO = "presto"

    # First match wins, so more specific tokens come first.
    # Edge and Chrome both advertise AppleWebKit; Trident UAs say "like Gecko".
    _ENGINE_TOKENS = (
        (("MSIE", "Trident"), TRIDENT),
        (("Edge/", "Edg/"), EDGE),
        (("Chrome", "Chromium"), BLINK),
        (("AppleWebKit",), WEBKIT),
        (("Presto",), PRESTO),
        (("Gecko",), GECKO),
    )

    def __init__(self, user_agent: str = "", accept_encoding: str = ""):
        self.user_agent = user_agent
        self.engine = self.detect_engine(user_agent)
        self.encodings = self.parse_encodings(accept_encoding)

    @classmethod
    def from_environment(cls, env: Union[ServerEnvironment, Mapping[str, str]]) -> "WebClient":
        if not isinstance(env, ServerEnvironment):
            env = ServerEnvironment(env)
        return cls(env.get("HTTP_USER_AGENT"), env.get("HTTP_ACCEPT_ENCODING"))

    @classmethod
    def detect_engine(cls, user_agent: str) -> str:
        for tokens, engine in cls._ENGINE_TOKENS:
            if any(token in user_agent for token in tokens):
                return engine
        return cls.UNKNOWN

    @staticmethod
    def parse_encodings(accept_encoding: str) -> List[str]:
        """
        Parse an Accept-Encoding header into tokens, keeping client order.

        "gzip;q=1.0, x-gzip, identity;q=0" → ["gzip", "x-gzip"]
        """
        encodings = []
        for part in accept_encoding.split(","):
            token, _, params = part.partition(";")
            token = token.strip().lower()
            if not token:
                continue
            if _is_refused(params):
                continue
            encodings.append(token)
        return encodings

    def __repr__(self) -> str:
        return f"WebClient(engine={self.engine!r}, encodings={self.encodings!r})"


def _is_refused(params: str) -> bool:
    for param in params.split(";"):
        name, _, value = param.partition("=")
        if name.strip().lower() == "q":
            try:
                return float(value.strip()) == 0
            except ValueError:
                return False
    return False
