"""
Unit tests for command-line parsing.
"""

import socket

import pytest

from syncserver.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST", "PORT", "BACKLOG", "DOC_ROOT", "TIMEOUT", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"SYNCSERVER_{name}", raising=False)


def parse(*argv):
    return config_from_args(build_parser().parse_args(list(argv)))


class TestArguments:

    def test_no_flags_gives_defaults(self):
        config = parse()

        assert config.port == 8080
        assert config.doc_root == "./www"
        assert config.confine_to_root is True

    def test_flags(self):
        config = parse(
            "--host", "127.0.0.1",
            "--port", "3000",
            "--backlog", "10",
            "--timeout", "30",
            "--root", "/srv/share",
            "--no-confine",
            "--log-level", "DEBUG",
            "--log-format", "json",
        )

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.backlog == 10
        assert config.timeout == 30.0
        assert config.doc_root == "/srv/share"
        assert config.confine_to_root is False
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("SYNCSERVER_PORT", "9000")
        monkeypatch.setenv("SYNCSERVER_DOC_ROOT", "/from/env")

        config = parse("--port", "9100")

        assert config.port == 9100
        assert config.doc_root == "/from/env"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--log-format", "xml"])

        assert exc_info.value.code == 2


class TestMain:

    def test_bind_failure_exits_1(self, tmp_path, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            port = taken.getsockname()[1]

            with pytest.raises(SystemExit) as exc_info:
                main(["--host", "127.0.0.1", "--port", str(port), "--root", str(tmp_path)])

        assert exc_info.value.code == 1
        assert "cannot listen" in capsys.readouterr().err

    def test_invalid_config_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--port", "70000"])

        assert exc_info.value.code == 1
