"""Persistent storage for the OAuth token pair.

Stores a single :class:`~bbauth.models.StoredTokens` record as JSON at
``~/.bitbucket-oauth.json`` (see :func:`~bbauth.config.get_token_path`).
A file that is missing, empty, not UTF-8 JSON, or fails schema validation reads
back as "no credentials"; any other filesystem error propagates.

Writes overwrite the file in place. There is no temp-file-and-rename step,
so a crash mid-write can leave a truncated file, which then loads as
``None``.

See Also:
    :class:`~bbauth.providers.oauth.OAuthProvider` -- the only writer.
    :func:`~bbauth.config.resolve_auth_config` -- reads it as a fallback.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from bbauth.config import get_token_path
from bbauth.models import StoredTokens

logger = logging.getLogger(__name__)


class TokenStore:
    """Read/write the token file.

    Args:
        path: File to use. Defaults to :func:`~bbauth.config.get_token_path`.

    Example::

        store = TokenStore(tmp_path / "tokens.json")
        store.save(StoredTokens(access_token="a", refresh_token="r", expires_at=0))
        assert store.load().access_token == "a"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else get_token_path()

    @property
    def path(self) -> Path:
        """The filesystem path of the token file."""
        return self._path

    def load(self) -> Optional[StoredTokens]:
        """Load the stored token pair.

        Returns:
            The validated :class:`~bbauth.models.StoredTokens`, or ``None``
            if the file is absent, empty, not JSON, or the wrong shape.

        Raises:
            OSError: For filesystem errors other than a missing file.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
            return StoredTokens.model_validate(data)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError):
            logger.debug("Ignoring unreadable token file at %s", self._path)
            return None

    def save(self, tokens: StoredTokens) -> None:
        """Write *tokens* as the file's entire content.

        Parent directories are created as needed and the file is restricted
        to ``0o600`` since it holds secrets.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(tokens.model_dump(mode="json"), indent=2)
        self._path.write_text(text, encoding="utf-8")
        os.chmod(self._path, 0o600)
        logger.debug("Saved tokens to %s", self._path)

    def clear(self) -> None:
        """Truncate the token file to empty. No-op when it does not exist."""
        if self._path.is_file():
            self._path.write_text("", encoding="utf-8")
