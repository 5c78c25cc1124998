#!/usr/bin/env python3
"""
Google Cloud Storage client for gscp operations
"""
import logging

import google.auth
from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.auth.transport.requests import AuthorizedSession
from google.cloud import storage
from requests.adapters import HTTPAdapter

from errors import CommitError, OpenError

logger = logging.getLogger(__name__)

MAX_POOL_CONNECTIONS = 100


def build_http_session(ca_bundle):
    """Build an authorized HTTP session that verifies TLS against ca_bundle"""
    credentials, project = google.auth.default(scopes=storage.Client.SCOPE)

    session = AuthorizedSession(credentials)
    session.verify = ca_bundle
    # Proxy settings come from HTTP(S)_PROXY / NO_PROXY
    session.trust_env = True
    adapter = HTTPAdapter(pool_connections=MAX_POOL_CONNECTIONS, pool_maxsize=MAX_POOL_CONNECTIONS)
    session.mount("https://", adapter)
    return session, credentials, project


def get_storage_client(settings):
    """Get an authenticated storage client using ambient credentials"""
    project = settings.get('project')
    ca_bundle = settings.get('ca_bundle')

    try:
        if ca_bundle:
            session, credentials, default_project = build_http_session(ca_bundle)
            logger.debug("Using trust roots from %s", ca_bundle)
            return storage.Client(
                project=project or default_project,
                credentials=credentials,
                _http=session,
            )
        return storage.Client(project=project)
    except (auth_exceptions.GoogleAuthError, OSError) as e:
        raise OpenError(f"Failed to create storage client: {e}") from e


def _request_kwargs(timeout):
    if timeout is None:
        return {}
    return {'timeout': timeout}


def open_object_reader(client, bucket, key, timeout=None):
    """Open a streaming reader for gs://bucket/key"""
    blob = client.bucket(bucket).blob(key)
    try:
        # Fetch metadata first so a missing object fails here, not mid-copy
        blob.reload(**_request_kwargs(timeout))
        reader = blob.open("rb", **_request_kwargs(timeout))
    except api_exceptions.GoogleAPIError as e:
        raise OpenError(f"Cannot open gs://{bucket}/{key}: {e}") from e

    logger.debug("Opened gs://%s/%s for reading (%s bytes)", bucket, key, blob.size)
    return reader


class ObjectWriter:
    """Streams bytes into a storage object.

    The object is only created when commit() succeeds; discard() cancels the
    pending upload without finalizing it.
    """

    def __init__(self, bucket, key, writer):
        self.bucket = bucket
        self.key = key
        self._writer = writer

    def write(self, data):
        return self._writer.write(data)

    def commit(self):
        try:
            self._writer.close()
        except Exception as e:
            raise CommitError(f"Failed to finalize gs://{self.bucket}/{self.key}: {e}") from e
        finally:
            self._writer = None

    def discard(self):
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        # terminate() cancels the upload session and closes the buffer, so the
        # writer's finalizer has nothing left to upload
        try:
            writer.terminate()
        except Exception as e:
            logger.warning("Failed to cancel upload to gs://%s/%s: %s", self.bucket, self.key, e)
        logger.warning("Discarded unfinished upload to gs://%s/%s", self.bucket, self.key)


def open_object_writer(client, bucket, key, timeout=None, chunk_size=None):
    """Open a streaming writer for gs://bucket/key"""
    blob = client.bucket(bucket).blob(key)
    try:
        writer = blob.open(
            "wb",
            chunk_size=chunk_size,
            ignore_flush=True,
            **_request_kwargs(timeout)
        )
    except (api_exceptions.GoogleAPIError, ValueError) as e:
        raise OpenError(f"Cannot open gs://{bucket}/{key} for writing: {e}") from e

    return ObjectWriter(bucket, key, writer)


def iter_blobs(client, bucket, prefix, timeout=None):
    """Iterate blobs in a bucket whose names start with prefix"""
    return iter(client.list_blobs(bucket, prefix=prefix, **_request_kwargs(timeout)))
