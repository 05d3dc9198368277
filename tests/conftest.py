"""Pytest configuration and fixtures."""

import pytest

from aniverse.core.cipher import CipherCodec
from aniverse.core.pipeline import ExtractionSecrets


PAGE_KEY = "37911490979715163134003223491201"
RESPONSE_KEY = "54674138327930866480207815084989"
IV = "3134003223491201"


@pytest.fixture
def codec():
    return CipherCodec()


@pytest.fixture
def secrets():
    """Key material of the player the pipeline tests talk to."""
    return ExtractionSecrets(page_key=PAGE_KEY, response_key=RESPONSE_KEY, iv=IV)
