"""Inbox scanner: find statement files and match them to accounts."""

import logging
from pathlib import Path
from typing import Optional

from finledger.domain.account import AccountId, AccountRegistry
from finledger.domain.entities import DetectedFile

logger = logging.getLogger(__name__)

HEADER_SNIFF_BYTES = 8 * 1024


def read_first_line(path: Path) -> str:
    """Return the first line of the first 8 KB of a file."""
    with open(path, "rb") as f:
        head = f.read(HEADER_SNIFF_BYTES)
    text = head.decode("utf-8-sig", errors="replace")
    return text.splitlines()[0] if text else ""


def detect_provider_from_header(header: str) -> Optional[str]:
    """Recognize a provider by the column names in a CSV header."""
    if "TransferWise ID" in header:
        return "wise"
    if "Transaction ID" in header and "Money Out" in header:
        return "monzo"
    return None


def detect_file(path: Path, chart_account_id: AccountId, expected_provider: Optional[str]) -> Optional[DetectedFile]:
    """Decide whether a file in an account folder is importable.

    PDFs are accepted only for Vanguard accounts. CSVs are fingerprinted by
    their header, falling back to the account's provider, and accepted only
    when the result matches the account's provider.
    """
    suffix = path.suffix.lower()

    if suffix == ".pdf":
        if expected_provider != "vanguard":
            return None
        return DetectedFile(path=path, provider="vanguard", chart_account_id=chart_account_id)

    if suffix == ".csv":
        provider = detect_provider_from_header(read_first_line(path)) or expected_provider
        if provider is None or provider != expected_provider:
            return None
        return DetectedFile(path=path, provider=provider, chart_account_id=chart_account_id)

    return None


def scan_inbox(inbox_dir: Path, registry: AccountRegistry) -> list[DetectedFile]:
    """List importable files under ``<inbox>/<account folder>/``.

    Folders not mapped to an account in the config are ignored, as are
    files the account's provider cannot handle.

    Args:
        inbox_dir: Inbox root
        registry: Configured accounts

    Returns:
        Detected files sorted by path
    """
    inbox_dir = Path(inbox_dir)
    if not inbox_dir.is_dir():
        logger.info("Inbox %s does not exist; nothing to import", inbox_dir)
        return []

    detected: list[DetectedFile] = []

    for folder in sorted(p for p in inbox_dir.iterdir() if p.is_dir()):
        account_id = registry.account_for_folder(folder.name)
        if account_id is None:
            logger.debug("Ignoring inbox folder %s: not mapped to an account", folder.name)
            continue

        expected_provider = registry.provider_for(account_id)
        for path in sorted(p for p in folder.iterdir() if p.is_file()):
            detected_file = detect_file(path, account_id, expected_provider)
            if detected_file is None:
                logger.warning("Ignoring %s: not a %s export", path, expected_provider)
                continue
            detected.append(detected_file)

    logger.info("Found %d importable file(s) in %s", len(detected), inbox_dir)
    return detected
