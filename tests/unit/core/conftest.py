"""Shared fixtures for core unit tests"""

import pytest

from draftkit.core.decisions import ScriptedResolver
from draftkit.core.models import ArticleDraft, ArticleMetadata, DraftSource, HeadingBlock, ParagraphBlock, SourceFormat


SAMPLE_MD = """\
---
title: Sample Article
author: Ada Lovelace
tags: [engines, math]
date: 2024-03-05
---

Intro paragraph. With a second sentence.

## Background

- item one
- item two

> Quoted wisdom.
>
> -- Charles

```python
print("hello")
```

---

Footer paragraph.
"""


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="resolver")
def resolver_fixture():
    return ScriptedResolver()


@pytest.fixture(name="draft")
def draft_fixture():
    """A complete, exportable draft."""
    return ArticleDraft(
        metadata=ArticleMetadata(
            title="Hello World",
            author="Ada",
            tags=["news"],
            excerpt="A short excerpt.",
            published_at="2024-03-05T10:00:00Z",
            slug="hello-world",
        ),
        blocks=[
            HeadingBlock(text="Section", level=2),
            ParagraphBlock(text="First line\nsecond line"),
        ],
        source=DraftSource(type=SourceFormat.markdown, file_name="hello.md"),
    )
