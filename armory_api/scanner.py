# armory_api/scanner.py
"""
Client for the image-recognition service that identifies armory items.

The service receives a photo as a base64 data URI and answers with its best
guess of the item type name and serial number. When the serial is not
legible the service makes up a placeholder, so callers should treat both
values as suggestions for the user to confirm.
"""
import logging
import os
import re
from typing import Any, Dict

import requests

from armory_api.errors import InvalidOperationError, ScannerError, ScannerUnavailableError

logger = logging.getLogger(__name__)

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$")


def _scanner_url() -> str:
    return os.getenv("SCANNER_URL", "").strip()


def _headers() -> Dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": "armory-api",
    }
    api_key = os.getenv("SCANNER_API_KEY")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def scan_armory_item(photo_data_uri: str) -> Dict[str, Any]:
    """
    Identify the armory item shown in ``photo_data_uri``.

    Args:
        photo_data_uri: ``data:<mimetype>;base64,<encoded_data>``

    Returns:
        {"item_type": str, "item_id": str}

    Raises:
        InvalidOperationError: the input is not a base64 data URI
        ScannerUnavailableError: SCANNER_URL is not configured
        ScannerError: the service failed or answered with something unusable
    """
    if not DATA_URI_RE.match(photo_data_uri or ""):
        raise InvalidOperationError("photo_data_uri must be a base64 data URI (data:<mimetype>;base64,...)")

    url = _scanner_url()
    if not url:
        raise ScannerUnavailableError("Image scanning is not configured")

    timeout = float(os.getenv("SCANNER_TIMEOUT", "30"))
    try:
        response = requests.post(url, json={"photo_data_uri": photo_data_uri}, headers=_headers(), timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.error(f"[scanner] request to {url} failed: {e}")
        raise ScannerError("Scanning the armory item image failed")
    except ValueError:
        logger.error(f"[scanner] non-JSON response from {url}")
        raise ScannerError("Scanning the armory item image failed")

    item_type = data.get("itemType", data.get("item_type")) if isinstance(data, dict) else None
    item_id = data.get("itemId", data.get("item_id")) if isinstance(data, dict) else None
    if not isinstance(item_type, str) or not isinstance(item_id, str):
        logger.error(f"[scanner] unexpected response shape: {data!r}")
        raise ScannerError("Scanner returned an unexpected response")

    logger.info(f"[scanner] identified item type '{item_type}' with id '{item_id}'")
    return {"item_type": item_type.strip(), "item_id": item_id.strip()}
