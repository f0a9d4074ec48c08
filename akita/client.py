"""
HTTP client for del.dog-style paste services.

Endpoints
- POST <provider>/documents
  • with a slug: JSON body {"slug": ..., "content": ...}
  • without a slug: text/plain body holding the content
  • X-Api-Key header when credentials are configured
  • 200 → {"key": ..., "isUrl": ...}; otherwise {"message": ...}
- GET <provider>/raw/<slug>
  • 200 → the raw document; otherwise the body is the error message

Failures (transport errors, non-200 replies, empty input) raise ClientError.
"""
import logging

import httpx

from .utils import *

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """
    the paste service rejected a request or could not be reached.
    """


class AkitaClient:
    """
    Paste service client bound to a Config.

    Usable as a context manager; the underlying httpx.Client is closed on exit.
    """

    def __init__(self, config, /, *, timeout=10.0, transport=Unset):
        self.config = config
        headers = {}
        if config.credentials is not None:
            headers["X-Api-Key"] = config.credentials.api_key
        self._client = httpx.Client(
            base_url=config.url,
            headers=headers,
            timeout=timeout,
            **({} if transport is Unset else {"transport": transport}),
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _send(self, method, path, **kwargs):
        logger.debug("%s %s/%s", method, self.config.url, path)
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as error:
            raise ClientError(str(error) or type(error).__name__) from error

    def put_doc(self, slug, content):
        """
        Upload a document and return its URL.

        slug may be None to let the service assign one.
        """
        if not content:
            raise ClientError("no content provided")

        if slug is not None:
            response = self._send("POST", "documents", json={"slug": slug, "content": content})
        else:
            response = self._send(
                "POST", "documents", content=content.encode(), headers={"Content-Type": "text/plain"}
            )

        if response.status_code != httpx.codes.OK:
            try:
                message = response.json()["message"]
            except (ValueError, KeyError, TypeError):
                message = response.text or response.reason_phrase
            raise ClientError(message)

        try:
            key = response.json()["key"]
        except (ValueError, KeyError, TypeError):
            raise ClientError("unexpected upload response: %r" % response.text) from None
        return "%s/%s" % (self.config.url, key)

    def get_doc(self, slug):
        """
        Download the raw content of a document.
        """
        if not slug:
            raise ClientError("no slug provided")

        response = self._send("GET", "raw/%s" % slug)
        if response.status_code != httpx.codes.OK:
            raise ClientError(response.text or response.reason_phrase)
        return response.text


__all__ = (
    "ClientError",
    "AkitaClient",
)
