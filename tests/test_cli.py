import json

import httpx
import pytest
import structlog

from jaguar_flux import cli
from jaguar_flux.client import JaguarFluxClient
from jaguar_flux.core.retry import RetryPolicy


class _RoutingTransport(httpx.AsyncBaseTransport):
    """Answers by endpoint host so one transport serves every subcommand."""

    def __init__(self, routes: dict[str, tuple[int, dict]]):
        self._routes = routes
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for fragment, (status, body) in self._routes.items():
            if fragment in request.url.host:
                return httpx.Response(status, json=body, request=request)
        return httpx.Response(404, json={"error": "no route"}, request=request)


@pytest.fixture(autouse=True)
def _reset_logging():
    # main() points structlog at the captured stderr; undo that for later tests.
    yield
    structlog.reset_defaults()


@pytest.fixture
def install_transport(monkeypatch: pytest.MonkeyPatch):
    def _install(routes: dict[str, tuple[int, dict]]) -> _RoutingTransport:
        transport = _RoutingTransport(routes)

        def _build_client(args):
            return JaguarFluxClient(
                args.base_url,
                http_client=httpx.AsyncClient(transport=transport),
                retry_policy=RetryPolicy(max_retries=0),
            )

        monkeypatch.setattr(cli, "_build_client", _build_client)
        return transport

    return _install


def test_generate_writes_png_and_prints_summary(
    install_transport, generation_payload, tmp_path, capsys
):
    transport = install_transport({"generate-api": (200, generation_payload("a cat"))})
    out = tmp_path / "images" / "cat.png"

    code = cli.main(
        ["--base-url", "https://me--shuttle-jaguar", "generate", "a cat", "--seed", "5", "--out", str(out)]
    )

    assert code == 0
    assert out.read_bytes().startswith(b"\x89PNG")
    summary = json.loads(capsys.readouterr().out)
    assert summary["file"] == str(out)
    assert summary["parameters"]["prompt"] == "a cat"
    assert transport.requests[0].url.params["seed"] == "5"


def test_batch_writes_one_file_per_prompt(install_transport, batch_payload, tmp_path, capsys):
    install_transport({"batch-api": (200, batch_payload(["a", "b"], base_seed=10))})

    code = cli.main(
        [
            "--base-url",
            "https://me--shuttle-jaguar",
            "batch",
            "a",
            "b",
            "--base-seed",
            "10",
            "--out-dir",
            str(tmp_path),
        ]
    )

    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    files = [item["file"] for item in summary["images"]]
    assert files == [str(tmp_path / "jaguar-batch-0-10.png"), str(tmp_path / "jaguar-batch-1-11.png")]
    assert all((tmp_path / name).exists() for name in ("jaguar-batch-0-10.png", "jaguar-batch-1-11.png"))


def test_info_prints_model_info(install_transport, model_info_payload, capsys):
    install_transport({"info": (200, model_info_payload)})

    assert cli.main(["--base-url", "https://me--shuttle-jaguar", "info"]) == 0
    assert json.loads(capsys.readouterr().out)["model"] == "shuttle-jaguar"


def test_api_error_exits_nonzero(install_transport, capsys):
    install_transport({"reload-model": (500, {"error": "reload failed"})})

    code = cli.main(["--base-url", "https://me--shuttle-jaguar", "reload"])

    assert code == 1
    assert json.loads(capsys.readouterr().out) == {"error": "reload failed", "status_code": 500}


def test_validation_error_exits_nonzero(install_transport, capsys):
    transport = install_transport({})

    code = cli.main(["--base-url", "https://me--shuttle-jaguar", "generate", "cat", "--steps", "99"])

    assert code == 1
    assert "Steps must be between 1 and 50" in json.loads(capsys.readouterr().out)["error"]
    assert transport.requests == []


def test_missing_base_url_is_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--base-url", "", "info"])

    assert exc_info.value.code == 2
