# docs/jvms_client.py
"""
Client for downloading the JVM Specification instruction set chapter.
"""
import os
from pathlib import Path
from typing import Optional, Union

import requests
import structlog

from .description_store import DescriptionStore

logger = structlog.get_logger()

DEFAULT_JVMS_HTML_URL = "http://docs.oracle.com/javase/specs/jvms/se7/html/jvms-6.html"
DEFAULT_JVMS_CSS_URL = "http://docs.oracle.com/javase/specs/javaspec.css"
JVMS_HTML_FILENAME = "JVMS.html"
JVMS_CSS_FILENAME = "JVMS.css"
DEFAULT_TIMEOUT = 10


class JVMSClient:
    """Fetches the JVMS document and keeps a local copy of it in a directory."""

    def __init__(
        self,
        directory: Union[str, Path] = ".",
        html_url: str = DEFAULT_JVMS_HTML_URL,
        css_url: str = DEFAULT_JVMS_CSS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.directory = Path(directory)
        self.html_url = html_url
        self.css_url_remote = css_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def html_path(self) -> Path:
        return self.directory / JVMS_HTML_FILENAME

    @property
    def css_path(self) -> Path:
        return self.directory / JVMS_CSS_FILENAME

    def fetch_text(self, url: str) -> str:
        """
        Fetch a URL as text. Request failures are logged and give an empty string.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            logger.error("JVMS request failed", url=url, error=str(e))
            return ""

    def fetch_jvms(self) -> bool:
        """
        Download the JVMS HTML and CSS into the directory.

        Nothing is written unless both downloads return content.

        Returns:
            True if both files were written
        """
        html = self.fetch_text(self.html_url)
        css = self.fetch_text(self.css_url_remote)

        if not html or not css:
            logger.warning("JVMS download incomplete, keeping existing copy", html=len(html), css=len(css))
            return False

        try:
            os.makedirs(self.directory, exist_ok=True)
            self.html_path.write_text(html, encoding="utf-8")
            self.css_path.write_text(css, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save JVMS document", path=str(self.directory), error=str(e))
            return False

        logger.info("Saved JVMS document", path=str(self.html_path), size=len(html))
        return True

    def has_local_jvms(self) -> bool:
        return self.html_path.exists()

    def css_url(self) -> Optional[str]:
        """File URL of the local stylesheet, or None if it has not been downloaded."""
        if self.css_path.exists():
            return self.css_path.resolve().as_uri()
        return None

    def load_into(self, store: DescriptionStore) -> int:
        """Load the local HTML copy into a description store."""
        if not self.has_local_jvms():
            logger.info("No local JVMS document", path=str(self.html_path))
            return 0
        return store.load_file(self.html_path)
