"""Shared fixtures for core unit tests"""

import pytest


KEY_VALUE_POST = """\
title = Notes on Parsing
date = 2019-03-04
tags = python, parsing
---
Intro with **bold** and a [link](https://example.com).

## Details

- one
- two
"""

HEADING_STYLE_POST = """\
# Notes on Parsing
## March 4th, 2019
###### python, parsing

Intro with **bold** and a [link](https://example.com).

## Details

- one
- two
"""

BUNDLE = """\
title = First
date = 2020-01-01
---
First body.
<!-- split -->
# Second
## 2020-01-02

Second body.
"""


@pytest.fixture(name="key_value_post")
def key_value_post_fixture():
    return KEY_VALUE_POST


@pytest.fixture(name="heading_style_post")
def heading_style_post_fixture():
    return HEADING_STYLE_POST


@pytest.fixture(name="bundle")
def bundle_fixture():
    return BUNDLE
