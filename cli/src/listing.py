#!/usr/bin/env python3
"""
List Cloud Storage objects under a prefix
"""
import sys
from dataclasses import dataclass
from datetime import datetime, timezone

import gcs_client
from errors import ListingError
from transfer import Deadline, parse_gs_path

UNITS = ['B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB', 'EiB']


@dataclass(frozen=True)
class ListingEntry:
    size: int
    updated: datetime
    name: str


def format_size(size_bytes):
    """Format size in bytes as a whole number of the largest unit that fits.

    Values are truncated, not rounded: 1536 bytes is "1 KiB".
    """
    if size_bytes < 0:
        raise ValueError(f"size must be non-negative, got {size_bytes}")

    for unit in UNITS[:-1]:
        shifted = size_bytes >> 10
        if shifted == 0:
            return f"{size_bytes} {unit}"
        size_bytes = shifted
    return f"{size_bytes} {UNITS[-1]}"


def format_timestamp(ts):
    """Format a datetime as RFC 3339 with second precision"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.isoformat(timespec='seconds')
    if text.endswith('+00:00'):
        text = text[:-6] + 'Z'
    return text


def format_entry(entry):
    return f"{format_size(entry.size)} {format_timestamp(entry.updated)} {entry.name}"


def iter_objects(path, settings=None, client=None):
    """Yield a ListingEntry for every object under a gs://bucket/prefix path.

    Entries come in the order the service returns them. Failures from the
    service raise ListingError.
    """
    settings = settings or {}
    bucket, prefix = parse_gs_path(path, allow_empty_key=True)
    deadline = Deadline(settings.get('timeout_seconds'))
    if client is None:
        client = gcs_client.get_storage_client(settings)

    try:
        blobs = gcs_client.iter_blobs(client, bucket, prefix, timeout=deadline.remaining())
    except Exception as e:
        raise ListingError(f"Listing gs://{bucket}/{prefix} failed: {e}") from e

    while True:
        try:
            blob = next(blobs)
        except StopIteration:
            return
        except Exception as e:
            raise ListingError(f"Listing gs://{bucket}/{prefix} failed: {e}") from e
        deadline.check("Listing")
        yield ListingEntry(size=blob.size or 0, updated=blob.updated, name=blob.name)


def list_objects(path, settings=None, client=None, out=None):
    """Print one line per object under path, returns the number listed"""
    out = out or sys.stdout
    count = 0
    for entry in iter_objects(path, settings=settings, client=client):
        print(format_entry(entry), file=out)
        count += 1
    return count
