# ============================================================================
# FILE: conftest.py
# RELPATH: datachunk/tests/conftest.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Pytest fixtures for Data Chunk Tool test suite
# ============================================================================

"""
Pytest configuration and shared fixtures.

This module provides reusable test fixtures for the Data Chunk Tool test
suite: sample payloads, sample documents and temporary directories.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import List
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from datachunk.assembler import assemble


# ============================================================================
# Sample Payload Fixtures
# ============================================================================

@pytest.fixture
def text_payload():
    """UTF-8 CSV text with a final newline (round-trips as asis)."""
    return "x,y\n1,2\n3,4\n".encode("utf-8")


@pytest.fixture
def binary_payload():
    """Small binary payload (PNG signature plus NUL and high bytes)."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\xff\x10" + bytes(range(256))


@pytest.fixture
def unicode_payload():
    """Non-ASCII text payload."""
    return "név,város\nÁrpád,Győr\n日本,東京\n".encode("utf-8")


# ============================================================================
# Document Fixtures
# ============================================================================

@pytest.fixture
def sample_document() -> List[str]:
    """
    Return a document with two data chunks and one R chunk.

    Line indexes (0-based):
        3-7    data chunk 'cars' (asis)
        9-11   r chunk
        13-16  data chunk without label (base64)
    """
    return [
        "---",
        "title: Example",
        "---",
        '```{data cars, format="text", encoding="asis", output.var="cars", loader.function=read.csv}',
        "speed,dist",
        "4,2",
        "7,4",
        "```",
        "",
        "```{r}",
        "summary(cars)",
        "```",
        "",
        '```{data, format="binary", encoding="base64"}',
        "AP8Q",
        "",
        "```",
        "The end.",
    ]


@pytest.fixture
def assembled_chunk(text_payload) -> List[str]:
    """Chunk lines for text_payload with an md5sum."""
    return assemble(text_payload, label="xy", output_var="xy", md5=True)


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def document_file(temp_dir, sample_document):
    """Write sample_document to disk and return its path."""
    path = temp_dir / "analysis.Rmd"
    path.write_text("\n".join(sample_document) + "\n", encoding="utf-8")
    return path


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: pytest, datachunk.assembler
# TESTS: N/A (test fixtures)
# ============================================================================
