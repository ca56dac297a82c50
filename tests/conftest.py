import pytest

from core.env_format import parse_content


@pytest.fixture
def parse():
    """Parse text as if it was read from path."""
    def _parse(content, path=".env"):
        return parse_content(path, content)
    return _parse


@pytest.fixture
def write_env(tmp_path):
    """Write an env file under tmp_path and return its path as a string."""
    def _write(name, content):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        return str(path)
    return _write
