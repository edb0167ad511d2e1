import tempfile
from pathlib import Path
from time import sleep

import pytest

from rowcache import config
from rowcache.cache.paths import cache_artifacts, cache_file_name, cache_file_path
from rowcache.utils import profiler
from rowcache.utils.naming import kebab_slug, snake_case, table_name_for

ENV_VARS = (
    "ROWCACHE_CACHE_PATH",
    "ROWCACHE_CACHE_PREFIX",
    "ROWCACHE_API_URL",
    "ROWCACHE_API_TOKEN",
    "ROWCACHE_INSERT_CHUNK_SIZE",
)


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    settings = config.get_settings()

    assert settings.cache_path == tempfile.gettempdir()
    assert settings.cache_prefix == "rowcache"
    assert settings.api_token == ""
    assert settings.insert_chunk_size == 100
    assert config.get_settings() is settings


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("ROWCACHE_CACHE_PATH", str(tmp_path))
    monkeypatch.setenv("ROWCACHE_INSERT_CHUNK_SIZE", "25")
    monkeypatch.setenv("ROWCACHE_API_TOKEN", "abc")

    settings = config.Settings()

    assert settings.cache_path == str(tmp_path)
    assert settings.insert_chunk_size == 25
    assert settings.api_token == "abc"


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    assert stats.label == "sleep"


def test_profile_block_records_duration_on_error():
    with pytest.raises(RuntimeError):
        with profiler.profile_block("boom") as stats:
            raise RuntimeError("boom")
    assert stats.end_ts >= stats.start_ts


@pytest.mark.parametrize(
    ("class_name", "expected"),
    [
        ("Foo", "foos"),
        ("Category", "categories"),
        ("Box", "boxes"),
        ("Status", "status"),
        ("ModelWithNonStandardKeys", "model_with_non_standard_keys"),
        ("HTTPEndpoint", "http_endpoints"),
    ],
)
def test_table_name_for(class_name, expected):
    assert table_name_for(class_name) == expected


def test_snake_case_and_slug():
    assert snake_case("ModelWithHTTPKeys") == "model_with_http_keys"
    assert kebab_slug("tests.integration.test_entities.Foo") == "tests-integration-test-entities-foo"
    assert kebab_slug("app.models.ModelWithCustomSchema") == "app-models-model-with-custom-schema"


def test_cache_paths_use_prefix_and_slug(tmp_path: Path):
    settings = config.Settings(cache_path=str(tmp_path), cache_prefix="sushi")

    name = cache_file_name("app.models.Foo", settings)

    assert name == "sushi-app-models-foo.sqlite"
    assert cache_file_path("app.models.Foo", settings) == tmp_path.resolve() / name


def test_cache_artifacts_lists_prefixed_files(tmp_path: Path):
    settings = config.Settings(cache_path=str(tmp_path), cache_prefix="rowcache")
    (tmp_path / "rowcache-app-foo.sqlite").write_bytes(b"")
    (tmp_path / "other-app-foo.sqlite").write_bytes(b"")

    assert [path.name for path in cache_artifacts(settings)] == ["rowcache-app-foo.sqlite"]


def test_cache_artifacts_of_missing_directory(tmp_path: Path):
    settings = config.Settings(cache_path=str(tmp_path / "missing"))

    assert cache_artifacts(settings) == []
