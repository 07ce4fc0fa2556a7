"""
pytest configuration and fixtures.
"""

from datetime import datetime, timezone
from typing import Dict
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpapp import AppConfig, WebApplication
from httpapp.core.transport import BufferedTransport
from httpapp.http.assembler import HeaderAssembler


FROZEN_NOW = datetime(2026, 10, 18, 12, 30, 45, tzinfo=timezone.utc)


class EchoApplication(WebApplication):
    """Test application: writes a fixed body, or whatever the test plugs in."""

    body = "<p>hello</p>"
    handler = None

    def do_execute(self) -> None:
        if self.handler is not None:
            self.handler(self)
        else:
            self.set_body(self.body)


@pytest.fixture
def origin_env() -> Dict[str, str]:
    """Origin-server style variables (Apache, nginx + FastCGI)."""
    return {
        "HTTP_HOST": "example.com",
        "SCRIPT_NAME": "/app/index.php",
        "PHP_SELF": "/app/index.php",
        "REQUEST_URI": "/app/index.php/foo",
        "HTTP_USER_AGENT": "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0",
        "HTTP_ACCEPT_ENCODING": "gzip, deflate",
    }


@pytest.fixture
def gateway_env() -> Dict[str, str]:
    """Gateway style variables: no REQUEST_URI."""
    return {
        "HTTP_HOST": "example.com",
        "SCRIPT_NAME": "/app/index.php",
        "QUERY_STRING": "a=1",
    }


@pytest.fixture
def transport() -> BufferedTransport:
    return BufferedTransport()


@pytest.fixture
def frozen_assembler() -> HeaderAssembler:
    """Assembler whose clock always returns FROZEN_NOW."""
    return HeaderAssembler(clock=lambda: FROZEN_NOW)


@pytest.fixture
def make_app(origin_env, transport):
    """
    Factory for EchoApplication instances.

        app = make_app(gzip=True)
        app = make_app(handler=lambda app: app.redirect("/login"))
    """
    def factory(environment=None, handler=None, body=None, **settings) -> EchoApplication:
        app = EchoApplication(
            config=AppConfig(**settings),
            environment=origin_env if environment is None else environment,
            transport=transport,
        )
        app.assembler = HeaderAssembler(clock=lambda: FROZEN_NOW)
        if handler is not None:
            app.handler = handler
        if body is not None:
            app.body = body
        return app

    return factory


@pytest.fixture
def frozen_now() -> datetime:
    return FROZEN_NOW
