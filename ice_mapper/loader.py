#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Document Loader

Reads layout and data documents from disk or over HTTP and hands back text.
Local files are decoded with a primary encoding and a fallback; remote sample
documents are fetched through a requests session with retries.

Functions:
    - decode_bytes: Decode raw bytes with an encoding fallback
    - read_text: Read a local file as text
    - build_session: Create a requests session with retry handling
    - fetch_text: Fetch a remote document as text
    - fetch_bytes: Fetch a remote document as bytes
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


def decode_bytes(content: bytes, encoding: str = "utf-8", fallback_encoding: str = "iso-8859-1") -> str:
    """Decode content, retrying with the fallback encoding on failure."""
    try:
        return content.decode(encoding)
    except UnicodeDecodeError:
        logger.info(f"Encoding {encoding} failed, trying {fallback_encoding}...")
        return content.decode(fallback_encoding)


def read_text(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    fallback_encoding: str = "iso-8859-1"
) -> str:
    """
    Read a local document as text.

    Args:
        file_path: Path to the document
        encoding: Primary text encoding
        fallback_encoding: Encoding used when the primary one fails

    Returns:
        str: Document text
    """
    with open(file_path, 'rb') as f:
        content = f.read()
    return decode_bytes(content, encoding, fallback_encoding)


def build_session(
    retry_total: int = 3,
    retry_backoff: float = 1.0,
    retry_statuses: Optional[List[int]] = None
) -> requests.Session:
    """Create a requests session that retries transient failures on GET."""
    session = requests.Session()

    retry_strategy = Retry(
        total=retry_total,
        backoff_factor=retry_backoff,
        status_forcelist=retry_statuses or [429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


def fetch_bytes(url: str, session: Optional[requests.Session] = None, timeout: int = 30) -> bytes:
    """
    Fetch a remote document.

    Raises:
        requests.HTTPError: On a non-success status
    """
    session = session or build_session()
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
    return response.content


def fetch_text(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
    encoding: str = "utf-8",
    fallback_encoding: str = "iso-8859-1"
) -> str:
    """Fetch a remote document as text."""
    return decode_bytes(fetch_bytes(url, session, timeout), encoding, fallback_encoding)
