from o3dr import credentials
from o3dr.credentials import load_api_key, lookup_api_key


def test_env_var_wins_when_file_absent(tmp_path):
    lookup = lookup_api_key(
        environ={"OPENAI_API_KEY": "X"}, env_file=tmp_path / "missing.env"
    )

    assert lookup.value == "X"
    assert lookup.source == "env"
    assert lookup.warning is None


def test_env_var_wins_over_file(tmp_path):
    env_file = tmp_path / ".openai.env"
    env_file.write_text('OPENAI_API_KEY="from-file"\n', encoding="utf-8")

    assert load_api_key(environ={"OPENAI_API_KEY": "from-env"}, env_file=env_file) == "from-env"


def test_file_value_has_quotes_stripped(tmp_path):
    env_file = tmp_path / ".openai.env"
    env_file.write_text(
        "# comment\nOTHER=1\nOPENAI_API_KEY=\"Y\"\nOPENAI_API_KEY=second\n",
        encoding="utf-8",
    )

    lookup = lookup_api_key(environ={}, env_file=env_file)

    assert lookup.value == "Y"
    assert lookup.source == "file"


def test_single_quotes_and_export_prefix(tmp_path):
    env_file = tmp_path / ".openai.env"
    env_file.write_text("export OPENAI_API_KEY='sk-abc'\n", encoding="utf-8")

    assert lookup_api_key(environ={}, env_file=env_file).value == "sk-abc"


def test_empty_env_var_falls_back_to_file(tmp_path):
    env_file = tmp_path / ".openai.env"
    env_file.write_text("OPENAI_API_KEY=file-key\n", encoding="utf-8")

    assert lookup_api_key(environ={"OPENAI_API_KEY": ""}, env_file=env_file).value == "file-key"


def test_neither_source_returns_none(tmp_path, caplog):
    with caplog.at_level("WARNING", logger=credentials.__name__):
        value = load_api_key(environ={}, env_file=tmp_path / "missing.env")

    assert value is None
    assert "OPENAI_API_KEY is not set" in caplog.text


def test_unreadable_file_is_a_warning_not_an_error(tmp_path, caplog):
    env_file = tmp_path / ".openai.env"
    env_file.mkdir()

    lookup = lookup_api_key(environ={}, env_file=env_file)
    assert lookup.value is None
    assert lookup.warning is not None

    with caplog.at_level("WARNING", logger=credentials.__name__):
        assert load_api_key(environ={}, env_file=env_file) is None
    assert "Could not read" in caplog.text
