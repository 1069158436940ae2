import pytest
from flask import Flask, abort

from objectapi.api.errors import register_error_handlers


@pytest.fixture
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DEMO_MODE"] = False
    app.config["PROPAGATE_EXCEPTIONS"] = False

    @app.route("/abort/<int:code>")
    def aborter(code):
        abort(code)

    @app.route("/boom")
    def boom():
        raise ValueError("secret detail")

    register_error_handlers(app)
    return app


@pytest.mark.parametrize(
    "code,error",
    [
        (400, "Bad Request"),
        (401, "Unauthorized"),
        (403, "Forbidden"),
        (404, "Not Found"),
        (405, "Method Not Allowed"),
    ],
)
def test_http_errors_are_json(app, code, error):
    response = app.test_client().get(f"/abort/{code}")
    assert response.status_code == code
    assert response.get_json()["error"] == error


def test_unhandled_exception_hides_details(app):
    response = app.test_client().get("/boom")
    assert response.status_code == 500
    payload = response.get_json()
    assert payload["error"] == "Internal Server Error"
    assert "secret detail" not in payload["message"]


def test_unhandled_exception_details_in_demo_mode(app):
    app.config["DEMO_MODE"] = True
    payload = app.test_client().get("/boom").get_json()
    assert payload["message"] == "ValueError: secret detail"


def test_unknown_route_is_json_404(client):
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"
