from __future__ import annotations

import resilex


def test_version() -> None:
    assert isinstance(resilex.__version__, str)


def test_public_api() -> None:
    for name in resilex.__all__:
        assert hasattr(resilex, name), name
