"""Shared fixtures for core unit tests"""

import pytest

from nixeval.config import Settings


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

```python
print("hello")
```

- item one
- item two

```nix
{ a = 1; }
```

```lib/helpers.nix
{ x = 2; }
```

~~~
plain fence
~~~

Footer paragraph.
"""


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
