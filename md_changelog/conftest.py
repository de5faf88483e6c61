import re
from pathlib import Path
from typing import Callable, Protocol

import pytest
from zero_3rdparty.file_utils import ensure_parents_write_text
from zero_3rdparty.str_utils import ensure_prefix

from md_changelog.config import ChangelogConfig, ChangesConfig, default_config
from md_changelog.settings import ENV_PREFIX

TEST_DATA_PATH = Path(__file__).parent / "testdata"
CHANGELOG_FILENAME = "CHANGELOG.md"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["CHANGELOG", "CONFIG", "MAX_ERROR_COUNT", "LOG_LEVEL", "WORK_DIR"]:
        monkeypatch.delenv(f"{ENV_PREFIX}{name}", raising=False)


@pytest.fixture()
def config() -> ChangelogConfig:
    return default_config()


@pytest.fixture()
def unlabeled_config() -> ChangelogConfig:
    return ChangelogConfig(changes=ChangesConfig(labels=[]))


@pytest.fixture()
def github_config() -> ChangelogConfig:
    config = default_config()
    config.links = {
        "unreleased": "https://github.com/me/repo/compare/{PREVIOUS}...HEAD",
        "initial-release": "https://github.com/me/repo/releases/tag/{CURRENT}",
        "release": "https://github.com/me/repo/compare/{PREVIOUS}...{CURRENT}",
        "mention": "https://github.com/{MENTION}",
    }
    return config


@pytest.fixture()
def work_dir(tmp_path, monkeypatch) -> Path:
    """Empty directory that is also the current working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


WriteChangelog = Callable[[str], Path]


@pytest.fixture()
def write_changelog(work_dir) -> WriteChangelog:
    def write(text: str) -> Path:
        path = work_dir / CHANGELOG_FILENAME
        ensure_parents_write_text(path, text)
        return path

    return write


class LocalRegressionCheck(Protocol):
    def __call__(self, text: str, extension: str): ...


@pytest.fixture()
def file_regression_testdata(file_regression, request) -> LocalRegressionCheck:
    basename = re.sub(r"[\W]", "_", request.node.name)

    def local_regression_check(text: str, extension: str):
        dotted_extension = ensure_prefix(extension, ".")
        path = TEST_DATA_PATH / f"{basename}{dotted_extension}"
        return file_regression.check(text, fullpath=path)

    return local_regression_check
