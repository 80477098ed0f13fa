import pytest


@pytest.fixture(autouse=True)
def _test_client_session_engine(settings):
    # The API is stateless (no django.contrib.sessions); the test client's
    # logout() still needs a session store, so give it one without a DB model.
    settings.SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"
