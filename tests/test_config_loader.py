import pytest

from mail_composer.config import ComposerConfig, MessageConfig
from mail_composer.config_loader import load_settings

ENV_VARS = [
    "MC_CONFIG",
    "MC_CHARSET",
    "MC_ENCODING",
    "MC_SMTP_HOST",
    "MC_SMTP_PORT",
    "MC_SMTP_USER",
    "MC_SMTP_PASSWORD",
    "MC_SMTP_USE_TLS",
    "MC_SMTP_START_TLS",
    "MC_SMTP_TIMEOUT",
    "MC_ATTACHMENTS_BASE_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file(tmp_path):
    config = load_settings(tmp_path / "missing.ini")
    assert config == ComposerConfig()
    assert config.smtp.host == "localhost"
    assert config.smtp.port == 25
    assert config.message.encoding == "quoted-printable"


def test_values_from_file(tmp_path):
    config_file = tmp_path / "mail.ini"
    config_file.write_text("""
[message]
charset = ISO-8859-1
encoding = base64

[smtp]
host = smtp.example.com
port = 587
user = alex
password = secret
start_tls = yes
timeout = 2.5

[attachments]
base_dir = /var/mail/files
""")

    config = load_settings(config_file)

    assert config.message == MessageConfig(charset="ISO-8859-1", encoding="base64")
    assert config.smtp.host == "smtp.example.com"
    assert config.smtp.port == 587
    assert (config.smtp.user, config.smtp.password) == ("alex", "secret")
    assert config.smtp.start_tls is True
    assert config.smtp.use_tls is False
    assert config.smtp.timeout == 2.5
    assert config.attachments.base_dir == "/var/mail/files"


def test_environment_fallback(monkeypatch, tmp_path):
    monkeypatch.setenv("MC_SMTP_HOST", "env.example.com")
    monkeypatch.setenv("MC_SMTP_PORT", "2525")
    monkeypatch.setenv("MC_SMTP_USE_TLS", "true")
    monkeypatch.setenv("MC_ENCODING", "base64")

    config = load_settings(tmp_path / "missing.ini")

    assert config.smtp.host == "env.example.com"
    assert config.smtp.port == 2525
    assert config.smtp.use_tls is True
    assert config.message.encoding == "base64"


def test_file_takes_precedence_over_environment(monkeypatch, tmp_path):
    config_file = tmp_path / "mail.ini"
    config_file.write_text("[smtp]\nhost = file.example.com\n")
    monkeypatch.setenv("MC_SMTP_HOST", "env.example.com")
    monkeypatch.setenv("MC_SMTP_PORT", "2525")

    config = load_settings(config_file)

    assert config.smtp.host == "file.example.com"
    assert config.smtp.port == 2525


def test_config_path_from_environment(monkeypatch, tmp_path):
    config_file = tmp_path / "custom.ini"
    config_file.write_text("[message]\ncharset = UTF-16\n")
    monkeypatch.setenv("MC_CONFIG", str(config_file))

    assert load_settings().message.charset == "UTF-16"


def test_default_path_is_config_ini_in_cwd(tmp_path):
    (tmp_path / "config.ini").write_text("[smtp]\nport = 1025\n")
    assert load_settings().smtp.port == 1025


def test_invalid_port(tmp_path):
    config_file = tmp_path / "mail.ini"
    config_file.write_text("[smtp]\nport = twenty-five\n")
    with pytest.raises(ValueError):
        load_settings(config_file)


def test_invalid_encoding(tmp_path):
    config_file = tmp_path / "mail.ini"
    config_file.write_text("[message]\nencoding = 8bit\n")
    with pytest.raises(ValueError):
        load_settings(config_file)
