# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                        EVENTS SNAPSHOT MODULE                              ║
# ║    Loads and saves the event collection as a file in a GitHub              ║
# ║    repository through the repository contents API.                        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
snapshot.py: Event snapshot persistence in a GitHub repository.

Reads return the blob sha alongside the collection; writes send that sha
back so GitHub rejects the commit if the file changed in between.
"""
import base64
from typing import Any, Dict, NamedTuple, Optional
from urllib.parse import quote

import requests

from calsync import __version__
from calsync.utils.error_handling import (
    SnapshotReadError,
    SnapshotWriteError,
    WriteConflictError,
    retry_api_call,
)
from calsync.utils.logging import logger
from .models import EventCollection

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CONSTANTS                                                                  ║
# ╚════════════════════════════════════════════════════════════════════════════╝

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_COMMIT_MESSAGE = "Updated json programmatically"
API_VERSION = "2022-11-28"
REQUEST_TIMEOUT = 30

class Snapshot(NamedTuple):
    collection: EventCollection
    sha: Optional[str]

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ GITHUB CONTENT STORE                                                       ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class GitHubContentStore:
    # --- __init__ ---
    # Args:
    #     repository: 'owner/name' of the repository holding the file.
    #     token: Token with contents read/write permission.
    #     api_url: REST API base (differs on GitHub Enterprise Server).
    #     branch: Branch to read and commit to; the default branch when None.
    #     commit_message: Message for commits made by save().
    #     committer: Optional {'name': ..., 'email': ...} used as committer and author.
    #     session: requests.Session to use; a new one when None.
    def __init__(self, repository: str, token: str, api_url: str = DEFAULT_API_URL,
                 branch: Optional[str] = None, commit_message: str = DEFAULT_COMMIT_MESSAGE,
                 committer: Optional[Dict[str, str]] = None,
                 session: Optional[requests.Session] = None):
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.branch = branch
        self.commit_message = commit_message
        self.committer = committer
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": f"calendar-json-sync/{__version__}",
        })

    def contents_url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.repository}/contents/{quote(path.lstrip('/'))}"

    # --- _request_contents ---
    # GETs the contents metadata. 404 is returned as-is (file absent); other
    # error statuses raise requests.HTTPError so retry_api_call can decide.
    def _request_contents(self, path: str) -> requests.Response:
        params = {"ref": self.branch} if self.branch else None
        response = self.session.get(self.contents_url(path), params=params, timeout=REQUEST_TIMEOUT)
        if response.status_code != 404:
            response.raise_for_status()
        return response

    def _request_raw(self, download_url: str) -> str:
        response = self.session.get(download_url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.content.decode("utf-8")

    def _decode(self, path: str, data: Any) -> str:
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise SnapshotReadError(f"{path} in {self.repository} is not a file")
        content = data.get("content") or ""
        if data.get("encoding") == "base64" and content:
            return base64.b64decode(content).decode("utf-8")
        # Files over 1 MB come back without inline content
        if data.get("download_url"):
            raw = retry_api_call(self._request_raw, data["download_url"])
            if raw is None:
                raise SnapshotReadError(f"Failed to download {path} after retries")
            return raw
        return content

    # --- load ---
    # Reads the stored collection and its revision token.
    # A missing file yields an empty collection with no sha. A file whose
    # content is not a valid collection is logged and replaced on the next
    # write (its sha is kept). Every other failure raises SnapshotReadError.
    # Args:
    #     path: File path inside the repository.
    # Returns: Snapshot(collection, sha)
    def load(self, path: str) -> Snapshot:
        try:
            response = retry_api_call(self._request_contents, path)
        except requests.exceptions.RequestException as e:
            raise SnapshotReadError(f"Error getting content of {path}: {e}") from e
        if response is None:
            raise SnapshotReadError(f"Error getting content of {path}: retries exhausted")
        if response.status_code == 404:
            logger.info(f"No stored events at {path} in {self.repository}, starting with an empty collection")
            return Snapshot(EventCollection(), None)

        try:
            data = response.json()
        except ValueError as e:
            raise SnapshotReadError(f"Unexpected response reading {path}: {e}") from e
        sha = data.get("sha") if isinstance(data, dict) else None
        try:
            text = self._decode(path, data)
        except requests.exceptions.RequestException as e:
            raise SnapshotReadError(f"Error downloading {path}: {e}") from e

        try:
            collection = EventCollection.from_json(text)
        except ValueError as e:
            logger.warning(f"Stored events file at {path} corrupted ({e}). Starting fresh.")
            collection = EventCollection()
        logger.debug(f"Loaded {len(collection)} stored events from {path} (sha {sha})")
        return Snapshot(collection, sha)

    # --- save ---
    # Commits new content for `path`. Not retried: a stale sha means another
    # writer got there first and the next run should start from its result.
    # Args:
    #     path: File path inside the repository.
    #     content: Serialized collection.
    #     sha: Revision token from load(); None when the file did not exist.
    # Returns: The sha of the newly written blob, None if the response omits it.
    def save(self, path: str, content: str, sha: Optional[str]) -> Optional[str]:
        body: Dict[str, Any] = {
            "message": self.commit_message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        if self.branch:
            body["branch"] = self.branch
        if self.committer:
            body["committer"] = dict(self.committer)
            body["author"] = dict(self.committer)

        try:
            response = self.session.put(self.contents_url(path), json=body, timeout=REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise SnapshotWriteError(f"Error writing {path}: {e}") from e

        if response.status_code == 409:
            raise WriteConflictError(f"{path} changed since it was read (sha {sha}): {self._error_message(response)}")
        if response.status_code == 422 and "sha" in self._error_message(response).lower():
            raise WriteConflictError(f"{path} was created since it was read: {self._error_message(response)}")
        if not response.ok:
            raise SnapshotWriteError(f"Error writing {path} ({response.status_code}): {self._error_message(response)}")

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Saved {path} but the response body was not JSON, new sha unknown")
            return None
        content_info = payload.get("content") if isinstance(payload, dict) else None
        new_sha = content_info.get("sha") if isinstance(content_info, dict) else None
        logger.info(f"Saved events to {self.repository}/{path} (sha {new_sha})")
        return new_sha

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return str(response.json().get("message", response.text))
        except ValueError:
            return response.text
