from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

VALID_HEADER = """\
---
slug: {slug}
title: {title}
date: 2021-03-14
author: dana-okafor
tags:
- react
- javascript
---
"""

VALID_BODY = """\
## Props

Props come from the parent.

```jsx render=true
function Greeting({ name }) {
  return <p>Hello, {name}!</p>;
}
```

## State

```js
const [count, setCount] = useState(0);
```
"""


def make_post_text(slug: str = "props-and-state", title: str = "Props and State", body: str = VALID_BODY) -> str:
    """Return the text of a valid post with the given slug and title."""
    return VALID_HEADER.format(slug=slug, title=title) + "\n" + body


@pytest.fixture
def post_text() -> Callable[..., str]:
    return make_post_text


@pytest.fixture
def site_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty content repository with no configuration file."""
    for key in ("POSTSHELF_PATHS__POSTS_DIR", "POSTSHELF_VALIDATION__FAIL_ON_WARNINGS", "POSTSHELF_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "content" / "posts").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def posts_dir(site_root: Path) -> Path:
    return site_root / "content" / "posts"


@pytest.fixture
def write_post_file(posts_dir: Path) -> Callable[[str, str], Path]:
    """Write ``text`` to ``posts_dir/name`` and return the path."""

    def _write(name: str, text: str) -> Path:
        path = posts_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
